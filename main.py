"""Command line entry point for stall pattern analysis and generation.

    python main.py analyze traces.txt > stats.tsv
    python main.py generate 0.1 3 100 10 42 U:G --out patterns.txt --stall-dir stalls/
"""

import argparse
import logging
import sys

from stallpattern.analysis import analyze_lines
from stallpattern.errors import InvalidTarget
from stallpattern.generation import PatternGeneration
from stallpattern.output import stats_table, write_stall_logs, write_traces
from stallpattern.selector import CANDIDATE_CAP
from stallpattern.statistics import SANE_MIN_VIDEO_DURATION
from stallpattern.target import NO_STRUCTURE, GenerationTarget


logger = logging.getLogger("stallpattern")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Analyse and synthesise video stall patterns.")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="per-trace statistics of recorded playouts")
    analyze.add_argument("input", nargs="?", default="-", help="trace file ('-' for stdin)")
    analyze.add_argument("--min-duration", type=int, default=SANE_MIN_VIDEO_DURATION)

    generate = sub.add_parser("generate", help="synthesise playouts matching target statistics")
    generate.add_argument("stall_ratio", type=float)
    generate.add_argument("stall_duration", type=float)
    generate.add_argument("length", type=int, help="played seconds per pattern")
    generate.add_argument("count", type=int, help="number of patterns requested")
    generate.add_argument("seed", type=int)
    generate.add_argument("structure", nargs="?", default=NO_STRUCTURE, help="e.g. U:G:U")
    generate.add_argument("--out", default="patterns.txt")
    generate.add_argument("--stall-dir", default=None, help="write one XML stall log per pattern")
    generate.add_argument("--candidate-cap", type=int, default=CANDIDATE_CAP)
    return parser


def run_analyze(args) -> int:
    if args.input == "-":
        rows = analyze_lines(sys.stdin, args.min_duration)
    else:
        with open(args.input, encoding="utf-8") as f:
            rows = analyze_lines(f, args.min_duration)
    sys.stdout.write(stats_table(rows))
    return 0


def run_generate(args) -> int:
    try:
        target = GenerationTarget(
            args.stall_ratio,
            args.stall_duration,
            args.length,
            args.count,
            args.seed,
            structure=args.structure,
        )
    except InvalidTarget as exc:
        logger.error("invalid target: %s", exc)
        return 2

    generation = PatternGeneration(target, {"candidate_cap": args.candidate_cap})
    result = generation.run()
    write_traces(args.out, result.accepted)
    if args.stall_dir:
        write_stall_logs(args.stall_dir, result.accepted)
    generation.print_report(result)
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if args.command == "analyze":
        return run_analyze(args)
    return run_generate(args)


if __name__ == "__main__":
    sys.exit(main())

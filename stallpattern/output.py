"""Writers for analysis tables, trace dumps and stall-event logs."""

import os
import xml.etree.ElementTree as ET
from typing import Iterable, List, Sequence

from stallpattern.playout import Playout
from stallpattern.statistics import stall_times


# The last column is advertised but not filled by format_stats.
STATS_COLUMNS = (
    "id",
    "duration",
    "total_stall_time",
    "stall_ratio",
    "avg_stall_duration",
    "stall_duration_stddev",
    "avg_inter_stall_time",
    "Gilbert_p",
    "Gilbert_q",
    "stall_structure",
)

MS_PER_SECOND = 1000


def stats_header() -> str:
    return "\t".join(STATS_COLUMNS)


def stats_table(rows: Iterable[str]) -> str:
    """Header line followed by one line per stats row."""
    return "\n".join([stats_header(), *rows]) + "\n"


# ---------------------------------------------------------------------------
# Trace dumps
# ---------------------------------------------------------------------------

def numbered(playouts: Sequence[Playout]) -> List[Playout]:
    """Renumber *playouts* 1..N in their current order."""
    return [p.with_id(i) for i, p in enumerate(playouts, start=1)]


def format_traces(playouts: Sequence[Playout]) -> str:
    return "".join(f"{p}\n" for p in numbered(playouts))


def write_traces(path: str, playouts: Sequence[Playout]) -> None:
    """Write accepted playouts as ``"id: pattern"`` lines, ids 1..N."""
    with open(path, "w", encoding="utf-8") as f:
        f.write(format_traces(playouts))


# ---------------------------------------------------------------------------
# Stall-event logs
# ---------------------------------------------------------------------------

def stall_log_xml(playout: Playout) -> str:
    """XML stall-event log for one playout, times in milliseconds."""
    root = ET.Element("stallEvents")
    for start, duration in stall_times(playout):
        ET.SubElement(
            root,
            "stallEvent",
            start=str(start * MS_PER_SECOND),
            duration=str(duration * MS_PER_SECOND),
        )
    return ET.tostring(root, encoding="unicode")


def write_stall_logs(directory: str, playouts: Sequence[Playout], prefix: str = "stalls_") -> List[str]:
    """Write one ``<prefix><id>.xml`` log per playout (ids 1..N); return the paths."""
    os.makedirs(directory, exist_ok=True)
    paths = []
    for playout in numbered(playouts):
        path = os.path.join(directory, f"{prefix}{playout.sequence_id}.xml")
        with open(path, "w", encoding="utf-8") as f:
            f.write('<?xml version="1.0" encoding="UTF-8"?>\n')
            f.write(stall_log_xml(playout))
            f.write("\n")
        paths.append(path)
    return paths

"""
Round-Trip-Time Averages

Average RTT of a stream or of the connection, preferring the cumulative
counters of the last report over the per-interval deltas.

DESIGN RULES:
- Pure functions, no side effects
- Cumulative counters are usable when both are present and the
  measurement count is positive; a total of exactly 0 is a measured 0
- Otherwise fall back to averaging the delta series
"""

from typing import Any, Optional

from schemas.report import MediaKind, StatType
from stats.reducers import Reports, average_values_of_reports, get_last_report


def _ratio(total: Any, measurements: Any) -> Optional[float]:
    """total / measurements, or None when the counters cannot be used."""
    if total is None or measurements is None:
        return None
    if measurements <= 0:
        return None
    return total / measurements


def average_rtt(reports: Optional[Reports], kind: MediaKind, ssrc: str) -> Optional[float]:
    """
    Average RTT of one outbound stream (ms).

    Returns:
        0 for an empty sequence, None when the ssrc is absent from the
        last report, else the cumulative or delta-based average
    """
    if not reports:
        return 0

    last_report = get_last_report(reports)
    stream = last_report.streams(kind).get(str(ssrc))
    if stream is None:
        return None

    average = _ratio(
        getattr(stream, "total_rtt_ms_out", None),
        getattr(stream, "total_rtt_measure_out", None),
    )
    if average is None:
        return average_values_of_reports(
            reports, StatType(MediaKind(kind).value), "delta_rtt_ms_out", ssrc=str(ssrc)
        )
    return average


def average_rtt_connectivity(reports: Optional[Reports]) -> float:
    """
    Average RTT of the selected candidate pair (ms).

    Call-scoped: returns 0 (never None) for an empty sequence.
    """
    if not reports:
        return 0

    data = get_last_report(reports).data
    average = _ratio(data.total_rtt_connectivity_ms, data.total_rtt_connectivity_measure)
    if average is None:
        return average_values_of_reports(reports, StatType.DATA, "delta_rtt_connectivity_ms")
    return average

"""
Statistical Reducers

Reduce a report sequence to average / min / max / volatility / last
value for one field, optionally scoped to one stream (ssrc).

DESIGN RULES:
- Pure functions, no side effects
- Never throw on absent data (neutral value instead)
- A report missing the ssrc or the field simply does not contribute
"""

import math
from typing import Any, List, Optional, Sequence

from schemas.errors import NoReportsAvailable
from schemas.report import MetricSnapshot, StatType


Reports = Sequence[MetricSnapshot]


def _resolve(obj: Any, path: str) -> Any:
    """Walk a dotted field path through models and dicts."""
    for part in path.split("."):
        if obj is None:
            return None
        if isinstance(obj, dict):
            obj = obj.get(part)
        else:
            obj = getattr(obj, part, None)
    return obj


def _is_sample(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def _scoped(report: MetricSnapshot, kind: StatType, ssrc: Optional[str]) -> Any:
    section = report.section(kind)
    if ssrc is None:
        return section
    if StatType(kind) not in (StatType.AUDIO, StatType.VIDEO):
        raise ValueError(f"ssrc scope only applies to media sections, not '{kind}'")
    return section.get(str(ssrc))


def values_of_reports(
    reports: Optional[Reports],
    kind: StatType,
    key: str,
    ssrc: Optional[str] = None,
    avoid_zero_value: bool = False,
) -> List[float]:
    """
    Collect the numeric samples of a field, oldest first.

    Args:
        reports: Report sequence (may be empty or None)
        kind: Report section to read from
        key: Field name, dotted for nested fields ("size_in.width")
        ssrc: Restrict to one stream; reports without it are skipped
        avoid_zero_value: Drop samples equal to 0

    Returns:
        List of samples (None / NaN / non-numeric values are skipped)
    """
    samples = []
    for report in reports or ():
        scoped = _scoped(report, kind, ssrc)
        if scoped is None:
            continue
        value = _resolve(scoped, key)
        if not _is_sample(value):
            continue
        if avoid_zero_value and value == 0:
            continue
        samples.append(value)
    return samples


def average_values_of_reports(
    reports: Optional[Reports],
    kind: StatType,
    key: str,
    avoid_zero_value: bool = False,
    ssrc: Optional[str] = None,
) -> float:
    """Mean of the samples, 0 when there are none."""
    samples = values_of_reports(reports, kind, key, ssrc, avoid_zero_value)
    if not samples:
        return 0
    return sum(samples) / len(samples)


def min_value_of_reports(
    reports: Optional[Reports],
    kind: StatType,
    key: str,
    ssrc: Optional[str] = None,
) -> float:
    """Smallest sample, 0 when there are none."""
    samples = values_of_reports(reports, kind, key, ssrc)
    return min(samples) if samples else 0


def max_value_of_reports(
    reports: Optional[Reports],
    kind: StatType,
    key: str,
    ssrc: Optional[str] = None,
) -> float:
    """Largest sample, 0 when there are none."""
    samples = values_of_reports(reports, kind, key, ssrc)
    return max(samples) if samples else 0


def volatility_values_of_reports(
    reports: Optional[Reports],
    kind: StatType,
    key: str,
    ssrc: Optional[str] = None,
) -> float:
    """
    Relative dispersion of the samples, in percent.

    Computed as the mean absolute deviation divided by the mean:
        mean(|v - avg|) / |avg| * 100

    Returns 0 with fewer than two samples or when the mean is 0.
    """
    samples = values_of_reports(reports, kind, key, ssrc)
    if len(samples) < 2:
        return 0

    average = sum(samples) / len(samples)
    if average == 0:
        return 0

    deviation = sum(abs(value - average) for value in samples) / len(samples)
    return deviation / abs(average) * 100


def last_of_reports(
    reports: Optional[Reports],
    kind: StatType,
    key: str,
    ssrc: Optional[str] = None,
) -> Any:
    """Value of the field in the most recent report that has it, else None."""
    for report in reversed(reports or ()):
        scoped = _scoped(report, kind, ssrc)
        if scoped is None:
            continue
        value = _resolve(scoped, key)
        if value is not None:
            return value
    return None


def get_last_report(reports: Optional[Reports]) -> MetricSnapshot:
    """
    Return the most recent report.

    Raises:
        NoReportsAvailable: when the sequence is empty
    """
    if not reports:
        raise NoReportsAvailable("No reports available")
    return reports[-1]

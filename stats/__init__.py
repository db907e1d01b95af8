# Stats Package
from stats.reducers import (
    values_of_reports,
    average_values_of_reports,
    min_value_of_reports,
    max_value_of_reports,
    volatility_values_of_reports,
    last_of_reports,
    get_last_report,
)
from stats.rtt import average_rtt, average_rtt_connectivity
from stats.network import get_path, get_remote_path

__all__ = [
    "values_of_reports",
    "average_values_of_reports",
    "min_value_of_reports",
    "max_value_of_reports",
    "volatility_values_of_reports",
    "last_of_reports",
    "get_last_report",
    "average_rtt",
    "average_rtt_connectivity",
    "get_path",
    "get_remote_path",
]

"""
Network Path

Describe how media flows: directly between peers or through a relay.
"""

from typing import Optional

from schemas.report import StatType
from stats.reducers import Reports, last_of_reports

RELAY = "relay"
UNKNOWN_PROTOCOL = "unknown"


def _protocol(reports: Optional[Reports], key: str) -> str:
    return last_of_reports(reports, StatType.NETWORK, key) or UNKNOWN_PROTOCOL


def get_path(reports: Optional[Reports]) -> str:
    """Local side: "direct/<protocol>" or "turn/<relay protocol>"."""
    candidate_type = last_of_reports(reports, StatType.NETWORK, "local_candidate_type")

    if candidate_type != RELAY:
        return f"direct/{_protocol(reports, 'local_candidate_protocol')}"

    return f"turn/{_protocol(reports, 'local_candidate_relay_protocol')}"


def get_remote_path(reports: Optional[Reports]) -> str:
    """Remote side. No relay protocol is known remotely, so the transport protocol is used in both cases."""
    candidate_type = last_of_reports(reports, StatType.NETWORK, "remote_candidate_type")
    protocol = _protocol(reports, "remote_candidate_protocol")

    if candidate_type != RELAY:
        return f"direct/{protocol}"

    return f"turn/{protocol}"

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from helpers import FakeClock, audio_in, report
from schemas.config import ExporterConfig, SequentialIdProvider


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    return ExporterConfig.build({"ticket": True, "record": False}, SequentialIdProvider())


@pytest.fixture
def jitter_reports():
    """Three reports with one inbound audio stream (jitter 5, 10, 15)."""
    return [
        report(0, audio_in("1111", delta_jitter_ms_in=5, mos_in=4.0, mos_emodel_in=4.2)),
        report(2, audio_in("1111", delta_jitter_ms_in=10, mos_in=3.0, mos_emodel_in=4.0)),
        report(4, audio_in("1111", delta_jitter_ms_in=15, mos_in=2.0, mos_emodel_in=3.8)),
    ]

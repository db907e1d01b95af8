"""Builders shared by the test modules."""

from datetime import datetime, timedelta, timezone

from schemas.report import DataInfo, NetworkInfo, new_snapshot, new_stream_metric

BASE_TIME = datetime(2026, 1, 27, 10, 0, 0, tzinfo=timezone.utc)


def at(seconds: float) -> datetime:
    """Instant `seconds` after the start of the test session."""
    return BASE_TIME + timedelta(seconds=seconds)


def audio_in(ssrc, **values):
    return new_stream_metric("audio", "inbound", ssrc, **values)


def audio_out(ssrc, **values):
    return new_stream_metric("audio", "outbound", ssrc, **values)


def video_in(ssrc, **values):
    return new_stream_metric("video", "inbound", ssrc, **values)


def video_out(ssrc, **values):
    return new_stream_metric("video", "outbound", ssrc, **values)


def report(seconds, *streams, network=None, data=None):
    """Build a report `seconds` into the session."""
    return new_snapshot(
        at(seconds),
        streams,
        network=NetworkInfo(**network) if network else None,
        data=DataInfo(**data) if data else None,
    )


class FakeClock:
    """Returns BASE_TIME, then one second later on every call."""

    def __init__(self):
        self.calls = 0

    def __call__(self):
        value = at(self.calls)
        self.calls += 1
        return value

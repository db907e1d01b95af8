# Schemas Package
from schemas.errors import TicketError, NoReportsAvailable, SchemaViolation
from schemas.report import (
    MediaKind,
    StatType,
    Direction,
    AudioInboundMetric,
    AudioOutboundMetric,
    VideoInboundMetric,
    VideoOutboundMetric,
    NetworkInfo,
    DataInfo,
    MetricSnapshot,
    new_stream_metric,
    new_snapshot,
    parse_snapshot,
)
from schemas.config import ExporterConfig, IdProvider, ShortIdProvider, SequentialIdProvider
from schemas.event import CustomEvent

__all__ = [
    "TicketError",
    "NoReportsAvailable",
    "SchemaViolation",
    "MediaKind",
    "StatType",
    "Direction",
    "AudioInboundMetric",
    "AudioOutboundMetric",
    "VideoInboundMetric",
    "VideoOutboundMetric",
    "NetworkInfo",
    "DataInfo",
    "MetricSnapshot",
    "new_stream_metric",
    "new_snapshot",
    "parse_snapshot",
    "ExporterConfig",
    "IdProvider",
    "ShortIdProvider",
    "SequentialIdProvider",
    "CustomEvent",
]

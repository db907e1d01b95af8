"""
Report Schemas

Data structures for one measurement interval ("report") and the
per-stream metrics it carries.

DESIGN RULES:
- Immutable value objects (frozen models)
- Closed variant set: {audio, video} x {inbound, outbound}
- Delta fields start at 0 (or None), never at a spurious value
- No aggregation logic here
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, Iterable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from schemas.errors import SchemaViolation


# --- Taxonomy ---

class MediaKind(str, Enum):
    """Kind of media carried by a stream."""
    AUDIO = "audio"
    VIDEO = "video"


class StatType(str, Enum):
    """Sections of a report that reducers can read from."""
    AUDIO = "audio"
    VIDEO = "video"
    NETWORK = "network"
    DATA = "data"


class Direction(str, Enum):
    """Direction of a stream, fixed for the lifetime of its ssrc."""
    INBOUND = "inbound"
    OUTBOUND = "outbound"


# Network infrastructure hints reported by the collector
INFRASTRUCTURE_VALUE: Dict[str, int] = {
    "ethernet": 0,
    "cellular_5g": 2,
    "wifi": 3,  # default
    "cellular_4g": 5,
    "cellular": 10,
}


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


# --- Nested descriptors ---

class CodecInfo(_Frozen):
    mime_type: Optional[str] = None
    clock_rate: Optional[int] = None
    sdp_fmtp_line: Optional[str] = None


class FrameSize(_Frozen):
    width: int = 0
    height: int = 0
    framerate: float = 0


class GlitchCounters(_Frozen):
    freeze: int = 0
    pause: int = 0


class QualityLimitation(_Frozen):
    reason: Optional[str] = None
    durations: Optional[Dict[str, float]] = None
    resolution_changes: int = Field(default=0, alias="resolutionChanges")


# --- Stream metrics ---

class AudioInboundMetric(_Frozen):
    """Inbound audio stream, one interval."""
    ssrc: str
    kind: Literal["audio"] = "audio"
    direction: Literal["inbound"] = "inbound"
    level_in: float = 0
    codec_id_in: str = ""
    codec_in: CodecInfo = Field(default_factory=CodecInfo)
    delta_jitter_ms_in: Optional[float] = 0
    delta_rtt_ms_out: Optional[float] = None
    total_rtt_ms_out: Optional[float] = 0
    total_rtt_measure_out: Optional[int] = 0
    percent_packets_lost_in: float = 0
    delta_packets_in: int = 0
    delta_packets_lost_in: int = 0
    total_packets_in: int = 0
    total_packets_lost_in: int = 0
    total_KBytes_in: float = 0
    delta_KBytes_in: float = 0
    delta_kbs_in: float = 0
    timestamp_in: Optional[float] = None
    mos_in: Optional[float] = 0
    mos_emodel_in: Optional[float] = 0
    track_in: str = ""


class AudioOutboundMetric(_Frozen):
    """Outbound audio stream, one interval."""
    ssrc: str
    kind: Literal["audio"] = "audio"
    direction: Literal["outbound"] = "outbound"
    active_out: Optional[bool] = None
    level_out: float = 0
    codec_id_out: str = ""
    codec_out: CodecInfo = Field(default_factory=CodecInfo)
    delta_jitter_ms_out: Optional[float] = 0
    delta_rtt_ms_out: Optional[float] = None
    total_rtt_ms_out: Optional[float] = 0
    total_rtt_measure_out: Optional[int] = 0
    percent_packets_lost_out: float = 0
    delta_packets_out: int = 0
    delta_packets_lost_out: int = 0
    total_packets_out: int = 0
    total_packets_lost_out: int = 0
    total_KBytes_out: float = 0
    delta_KBytes_out: float = 0
    delta_kbs_out: float = 0
    timestamp_out: Optional[float] = None
    mos_out: Optional[float] = 0
    mos_emodel_out: Optional[float] = 0
    track_out: str = ""


class VideoInboundMetric(_Frozen):
    """Inbound video stream, one interval."""
    ssrc: str
    kind: Literal["video"] = "video"
    direction: Literal["inbound"] = "inbound"
    codec_id_in: str = ""
    size_in: FrameSize = Field(default_factory=FrameSize)
    codec_in: CodecInfo = Field(default_factory=CodecInfo)
    delta_jitter_ms_in: Optional[float] = 0
    percent_packets_lost_in: float = 0
    delta_packets_in: int = 0
    delta_packets_lost_in: int = 0
    total_packets_in: int = 0
    total_packets_lost_in: int = 0
    total_KBytes_in: float = 0
    delta_KBytes_in: float = 0
    delta_kbs_in: float = 0
    delta_glitch_in: GlitchCounters = Field(default_factory=GlitchCounters)
    total_glitch_in: GlitchCounters = Field(default_factory=GlitchCounters)
    decoder_in: Optional[str] = None
    delta_ms_decode_frame_in: float = 0
    total_frames_decoded_in: int = 0
    total_time_decoded_in: float = 0
    delta_nack_sent_in: int = 0
    delta_pli_sent_in: int = 0
    total_nack_sent_in: int = 0
    total_pli_sent_in: int = 0
    track_in: str = ""


class VideoOutboundMetric(_Frozen):
    """Outbound video stream, one interval."""
    ssrc: str
    kind: Literal["video"] = "video"
    direction: Literal["outbound"] = "outbound"
    active_out: Optional[bool] = None
    codec_id_out: str = ""
    size_out: FrameSize = Field(default_factory=FrameSize)
    size_pref_out: FrameSize = Field(default_factory=FrameSize)
    codec_out: CodecInfo = Field(default_factory=CodecInfo)
    delta_jitter_ms_out: Optional[float] = 0
    delta_rtt_ms_out: Optional[float] = None
    total_rtt_ms_out: Optional[float] = 0
    total_rtt_measure_out: Optional[int] = 0
    percent_packets_lost_out: float = 0
    delta_packets_out: int = 0
    delta_packets_lost_out: int = 0
    total_packets_out: int = 0
    total_packets_lost_out: int = 0
    total_KBytes_out: float = 0
    delta_KBytes_out: float = 0
    delta_kbs_out: float = 0
    encoder_out: Optional[str] = None
    delta_ms_encode_frame_out: float = 0
    total_time_encoded_out: float = 0
    total_frames_encoded_out: int = 0
    delta_nack_received_out: int = 0
    delta_pli_received_out: int = 0
    total_nack_received_out: int = 0
    total_pli_received_out: int = 0
    limitation_out: QualityLimitation = Field(default_factory=QualityLimitation)
    timestamp_out: Optional[float] = None
    track_out: str = ""


AudioMetric = Annotated[
    Union[AudioInboundMetric, AudioOutboundMetric],
    Field(discriminator="direction"),
]
VideoMetric = Annotated[
    Union[VideoInboundMetric, VideoOutboundMetric],
    Field(discriminator="direction"),
]
StreamMetric = Union[
    AudioInboundMetric,
    AudioOutboundMetric,
    VideoInboundMetric,
    VideoOutboundMetric,
]


# --- Call-level sections ---

class NetworkInfo(_Frozen):
    """Last-known selected candidate pair."""
    infrastructure: int = INFRASTRUCTURE_VALUE["wifi"]
    local_candidate_id: str = ""
    local_candidate_type: str = ""
    local_candidate_protocol: str = ""
    local_candidate_relay_protocol: str = ""
    remote_candidate_id: str = ""
    remote_candidate_type: str = ""
    remote_candidate_protocol: str = ""


class DataInfo(_Frozen):
    """Call-level traffic and connectivity counters."""
    total_KBytes_in: float = 0
    total_KBytes_out: float = 0
    delta_KBytes_in: Optional[float] = 0
    delta_KBytes_out: Optional[float] = 0
    delta_kbs_in: Optional[float] = 0
    delta_kbs_out: Optional[float] = 0
    delta_kbs_bandwidth_in: Optional[float] = 0
    delta_kbs_bandwidth_out: Optional[float] = 0
    delta_rtt_connectivity_ms: Optional[float] = None
    total_rtt_connectivity_ms: Optional[float] = 0
    total_rtt_connectivity_measure: Optional[int] = 0


class MetricSnapshot(_Frozen):
    """
    One measurement interval of a session.

    `audio` and `video` map each ssrc to exactly one stream metric.
    `passthrough` holds raw fields copied by the collector, never read here.
    """
    timestamp: datetime
    count: int = 0
    pname: str = ""
    call_id: str = ""
    user_id: str = ""
    audio: Dict[str, AudioMetric] = Field(default_factory=dict)
    video: Dict[str, VideoMetric] = Field(default_factory=dict)
    network: NetworkInfo = Field(default_factory=NetworkInfo)
    data: DataInfo = Field(default_factory=DataInfo)
    experimental: Dict[str, Any] = Field(default_factory=dict)
    passthrough: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _fill_ssrc_from_key(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        values = dict(values)
        for section in ("audio", "video"):
            streams = values.get(section)
            if not isinstance(streams, dict):
                continue
            filled = {}
            for ssrc, metric in streams.items():
                if isinstance(metric, dict) and "ssrc" not in metric:
                    metric = {**metric, "ssrc": str(ssrc)}
                filled[str(ssrc)] = metric
            values[section] = filled
        return values

    @model_validator(mode="after")
    def _check_keys_match_ssrc(self) -> "MetricSnapshot":
        for section in (self.audio, self.video):
            for ssrc, metric in section.items():
                if metric.ssrc != ssrc:
                    raise ValueError(
                        f"stream keyed '{ssrc}' carries ssrc '{metric.ssrc}'"
                    )
        return self

    def section(self, kind: StatType) -> Any:
        """Return the section of this report matching `kind`."""
        kind = StatType(kind)
        if kind is StatType.AUDIO:
            return self.audio
        if kind is StatType.VIDEO:
            return self.video
        if kind is StatType.NETWORK:
            return self.network
        if kind is StatType.DATA:
            return self.data
        raise ValueError(f"Unhandled stat type: {kind}")

    def streams(self, kind: MediaKind) -> Dict[str, StreamMetric]:
        """Return the ssrc -> metric mapping for a media kind."""
        kind = MediaKind(kind)
        if kind is MediaKind.AUDIO:
            return self.audio
        if kind is MediaKind.VIDEO:
            return self.video
        raise ValueError(f"Unhandled media kind: {kind}")


# --- Factories ---

_STREAM_VARIANTS = {
    (MediaKind.AUDIO, Direction.INBOUND): AudioInboundMetric,
    (MediaKind.AUDIO, Direction.OUTBOUND): AudioOutboundMetric,
    (MediaKind.VIDEO, Direction.INBOUND): VideoInboundMetric,
    (MediaKind.VIDEO, Direction.OUTBOUND): VideoOutboundMetric,
}


def new_stream_metric(kind: str, direction: str, ssrc: str, **values: Any) -> StreamMetric:
    """
    Build the stream metric variant for (kind, direction).

    Raises:
        SchemaViolation: unknown kind/direction or invalid field values
    """
    try:
        key = (MediaKind(kind), Direction(direction))
    except ValueError as exc:
        raise SchemaViolation(f"Unknown stream variant: {kind}/{direction}") from exc

    model = _STREAM_VARIANTS[key]
    try:
        return model(ssrc=str(ssrc), **values)
    except ValidationError as exc:
        raise SchemaViolation(f"Invalid {kind}/{direction} metric for ssrc {ssrc}: {exc}") from exc


def new_snapshot(
    timestamp: datetime,
    streams: Iterable[StreamMetric] = (),
    network: Optional[NetworkInfo] = None,
    data: Optional[DataInfo] = None,
    **extra: Any,
) -> MetricSnapshot:
    """
    Build a report from a flat list of stream metrics.

    Each metric lands in the audio or video map according to its kind.
    """
    audio: Dict[str, StreamMetric] = {}
    video: Dict[str, StreamMetric] = {}
    for metric in streams:
        target = audio if MediaKind(metric.kind) is MediaKind.AUDIO else video
        if metric.ssrc in target:
            raise SchemaViolation(f"Duplicate ssrc {metric.ssrc} in {metric.kind} streams")
        target[metric.ssrc] = metric

    try:
        return MetricSnapshot(
            timestamp=timestamp,
            audio=audio,
            video=video,
            network=network or NetworkInfo(),
            data=data or DataInfo(),
            **extra,
        )
    except ValidationError as exc:
        raise SchemaViolation(f"Invalid report: {exc}") from exc


def parse_snapshot(raw: Any) -> MetricSnapshot:
    """
    Validate a raw mapping (e.g. decoded JSON) into a MetricSnapshot.

    Raises:
        SchemaViolation: when the mapping does not match the report shape
    """
    if isinstance(raw, MetricSnapshot):
        return raw
    try:
        return MetricSnapshot.model_validate(raw)
    except ValidationError as exc:
        raise SchemaViolation(f"Invalid report: {exc}") from exc

"""
Ticket tests: per-stream blocks, call-level data, details and identification.
"""

import json

import pytest

from exporter.assembler import assemble_stream, assemble_streams
from exporter.exporter import Exporter
from exporter.ticket import (
    VERSION_EXPORTER,
    inbound_packet_counts,
    packet_loss_percent,
    ticket_to_json,
)
from helpers import BASE_TIME, at, audio_in, audio_out, report, video_in, video_out
from schemas.config import ExporterConfig, SequentialIdProvider
from schemas.event import CustomEvent
from schemas.report import Direction, MediaKind


def make_exporter(clock=None, **options):
    options.setdefault("ticket", True)
    return Exporter(ExporterConfig.build(options, SequentialIdProvider()), clock=clock)


def test_empty_ticket_is_neutral():
    exporter = make_exporter()
    ticket = exporter.ticket

    assert ticket["version"] == VERSION_EXPORTER
    assert ticket["started"] is None
    assert ticket["ended"] is None
    assert ticket["ssrc"] == {}
    assert ticket["details"] == {"count": 0, "reports": [], "reference": None}
    assert ticket["data"]["rtt"]["avg"] == 0
    assert ticket["data"]["packetsLost"]["audio"]["in"]["avg"] == 0
    assert ticket["data"]["packetsLost"]["video"]["in"]["avg"] == 0
    assert ticket["data"]["bitrate"]["in"]["avg"] == 0
    assert ticket["data"]["traffic"]["out"]["volatility"] == 0
    assert exporter.get_reports_number() == 0


def test_inbound_audio_block(jitter_reports):
    """Test: inbound audio stream -> jitter and both MOS blocks."""
    exporter = make_exporter()
    for item in jitter_reports:
        exporter.add_report(item)

    block = exporter.ticket["ssrc"]["1111"]

    assert block["type"] == "audio"
    assert block["direction"] == "inbound"
    assert block["jitter"]["avg"] == 10
    assert block["jitter"]["min"] == 5
    assert block["jitter"]["max"] == 15
    assert block["jitter"]["_unit"] == {"avg": "ms", "min": "ms", "max": "ms", "volatility": "percent"}
    assert block["mos"]["effective"]["avg"] == pytest.approx(3.0)
    assert block["mos"]["effective"]["min"] == 2.0
    assert block["mos"]["emodel"]["max"] == 4.2
    assert block["mos"]["_unit"]["avg"] == "number (1-5)"
    assert "rtt" not in block


def test_outbound_audio_block():
    """Test: outbound audio stream -> jitter and rtt (cumulative average)."""
    reports = [
        report(0, audio_out("2222", delta_jitter_ms_out=2, delta_rtt_ms_out=None)),
        report(2, audio_out("2222", delta_jitter_ms_out=4, delta_rtt_ms_out=90, total_rtt_ms_out=90, total_rtt_measure_out=1)),
        report(4, audio_out("2222", delta_jitter_ms_out=6, delta_rtt_ms_out=210, total_rtt_ms_out=300, total_rtt_measure_out=3)),
    ]

    block = assemble_streams(reports)["2222"]

    assert block["direction"] == "outbound"
    assert block["jitter"]["avg"] == 4
    assert block["rtt"]["avg"] == 100
    assert block["rtt"]["min"] == 90
    assert block["rtt"]["max"] == 210
    assert block["rtt"]["_unit"]["volatility"] == "percent"
    assert "mos" not in block


def test_video_blocks_have_no_mos():
    reports = [
        report(0, video_in("10", delta_jitter_ms_in=3), video_out("11", delta_jitter_ms_out=1, delta_rtt_ms_out=50)),
        report(1, video_in("10", delta_jitter_ms_in=5), video_out("11", delta_jitter_ms_out=3, delta_rtt_ms_out=70)),
    ]

    streams = assemble_streams(reports)

    assert streams["10"]["type"] == "video"
    assert set(streams["10"]) == {"type", "direction", "jitter"}
    assert streams["10"]["jitter"]["avg"] == 4
    assert set(streams["11"]) == {"type", "direction", "jitter", "rtt"}
    assert streams["11"]["rtt"]["avg"] == 60


def test_streams_follow_the_last_report():
    """Test: audio streams first, then video; streams gone from the last report are omitted."""
    reports = [
        report(0, audio_in("1"), audio_in("gone")),
        report(1, video_in("3"), audio_out("2"), audio_in("1")),
    ]

    streams = assemble_streams(reports)

    assert list(streams) == ["2", "1", "3"]
    assert "gone" not in streams


def test_assemble_stream_rejects_unknown_direction():
    with pytest.raises(ValueError):
        assemble_stream([report(0)], MediaKind.AUDIO, "sideways", "1")


def test_record_false_keeps_count_only():
    """Test: record=False, ticket=True, 5 reports -> count 5, reports []."""
    exporter = make_exporter(record=False)
    for i in range(5):
        exporter.add_report(report(i, audio_in("1")))

    details = exporter.ticket["details"]
    assert details["count"] == 5
    assert details["reports"] == []


def test_record_true_includes_full_sequence():
    exporter = make_exporter(record=True)
    reports = [report(i, audio_in("1", delta_jitter_ms_in=i)) for i in range(3)]
    for item in reports:
        exporter.add_report(item)

    assert exporter.ticket["details"]["reports"] == reports


def test_ticket_disabled_keeps_nothing():
    exporter = make_exporter(ticket=False)
    for i in range(5):
        exporter.add_report(report(i, audio_in("1")))

    assert exporter.get_reports_number() == 0
    assert exporter.ticket["details"]["count"] == 0


def test_packet_loss_percent():
    assert packet_loss_percent(0, 0) == 0
    assert packet_loss_percent(5, 95) == 5.0
    assert packet_loss_percent(1, 2) == 33.33
    assert packet_loss_percent(2, 1) == 66.67
    assert packet_loss_percent(float("nan"), 1) == 0


def test_packet_loss_percent_rounds_half_up():
    """Test: a ratio ending in exactly 5 at the third decimal rounds up."""
    # 1 / 32 = 3.125 %
    assert packet_loss_percent(1, 31) == 3.13
    # 1 / 8 = 12.5 %, 3 / 8 = 37.5 %
    assert packet_loss_percent(1, 7) == 12.5
    assert packet_loss_percent(3, 5) == 37.5


def test_packet_loss_sums_inbound_streams():
    reports = [
        report(0, audio_in("1", total_packets_lost_in=1, total_packets_in=50)),
        report(1,
               audio_in("1", total_packets_lost_in=2, total_packets_in=98),
               audio_in("2", total_packets_lost_in=1, total_packets_in=99),
               audio_out("3", total_packets_lost_out=40),
               video_in("4", total_packets_lost_in=0, total_packets_in=500)),
    ]

    assert inbound_packet_counts(reports, MediaKind.AUDIO) == (3, 197)
    assert inbound_packet_counts(reports, MediaKind.VIDEO) == (0, 500)
    assert inbound_packet_counts([], MediaKind.AUDIO) == (0, 0)

    exporter = make_exporter()
    for item in reports:
        exporter.add_report(item)
    packets_lost = exporter.ticket["data"]["packetsLost"]
    assert packets_lost["audio"]["in"]["avg"] == 1.5
    assert packets_lost["video"]["in"]["avg"] == 0
    assert packets_lost["unit"] == {"avg": "percent"}


def test_call_level_data_block():
    network = {
        "local_candidate_type": "relay",
        "local_candidate_relay_protocol": "udp",
        "remote_candidate_type": "host",
        "remote_candidate_protocol": "udp",
    }
    exporter = make_exporter()
    exporter.add_report(report(0, data={"delta_kbs_in": 100, "delta_kbs_out": 40, "delta_KBytes_in": 25, "delta_rtt_connectivity_ms": 20}, network=network))
    exporter.add_report(report(2, data={"delta_kbs_in": 300, "delta_kbs_out": 60, "delta_KBytes_in": 75, "delta_rtt_connectivity_ms": 40}, network=network))

    data = exporter.ticket["data"]

    assert data["rtt"]["avg"] == 30
    assert data["rtt"]["max"] == 40
    assert data["bitrate"]["in"]["avg"] == 200
    assert data["bitrate"]["out"]["min"] == 40
    assert data["bitrate"]["in"]["volatility"] == pytest.approx(50)
    assert data["bitrate"]["unit"]["avg"] == "kbs"
    assert data["traffic"]["in"]["max"] == 75
    assert data["traffic"]["unit"]["avg"] == "KBytes"
    assert data["network"] == {"localConnection": "turn/udp", "remoteConnection": "direct/udp"}


def test_identification_events_and_timestamps(clock):
    exporter = make_exporter(clock=clock, pname="p-call", agent="pytest-agent")
    event = CustomEvent(name="mute", at=at(1))

    exporter.start()
    exporter.add_custom_event(event)
    exporter.add_report(report(0, audio_in("1")))
    baseline = exporter.get_last_report()
    exporter.save_reference_report(baseline)
    exporter.stop()

    ticket = exporter.ticket

    assert ticket["started"] == BASE_TIME.isoformat()
    assert ticket["ended"] == at(1).isoformat()
    assert ticket["ua"] == {"agent": "pytest-agent", "pname": "p-call", "user_id": "u-2"}
    assert ticket["call"] == {"call_id": "c-1", "events": [event]}
    assert ticket["details"]["reference"] is baseline


def test_identifiers_filled_for_plain_config():
    """Test: a config without identifiers still yields a fully identified ticket."""
    exporter = Exporter(ExporterConfig(record=True), id_provider=SequentialIdProvider())

    ticket = exporter.ticket

    assert ticket["ua"]["pname"] == "p-1"
    assert ticket["call"]["call_id"] == "c-2"
    assert ticket["ua"]["user_id"] == "u-3"
    assert exporter.config.record is True


def test_identifiers_filled_on_update_config():
    exporter = Exporter(id_provider=SequentialIdProvider(start=10))

    exporter.update_config(ExporterConfig(cid="c-explicit", verbose=True))

    assert exporter.config.cid == "c-explicit"
    assert exporter.config.pname == "p-13"
    assert exporter.config.uid == "u-14"
    assert exporter.ticket["call"]["call_id"] == "c-explicit"


def test_default_exporter_generates_identifiers():
    ticket = Exporter().ticket

    assert ticket["ua"]["pname"].startswith("p-")
    assert ticket["call"]["call_id"].startswith("c-")
    assert ticket["ua"]["user_id"].startswith("u-")


def test_ticket_does_not_mutate_the_ledger(jitter_reports):
    exporter = make_exporter(record=True)
    for item in jitter_reports:
        exporter.add_report(item)

    first = exporter.ticket
    second = exporter.ticket

    assert first == second
    assert exporter.get_reports_number() == 3
    assert exporter.get_last_report() is jitter_reports[-1]


def test_ticket_to_json_round_trips_through_json(jitter_reports):
    exporter = make_exporter(record=True)
    for item in jitter_reports:
        exporter.add_report(item)
    exporter.add_custom_event(CustomEvent(name="hold", at=at(3)))

    decoded = json.loads(ticket_to_json(exporter.ticket))

    assert decoded["details"]["count"] == 3
    assert decoded["details"]["reports"][0]["audio"]["1111"]["delta_jitter_ms_in"] == 5
    assert decoded["call"]["events"][0]["name"] == "hold"
    assert decoded["ssrc"]["1111"]["jitter"]["avg"] == 10


def test_direction_enum_matches_ticket_strings():
    assert Direction.INBOUND == "inbound"
    assert MediaKind.VIDEO.value == "video"

"""
Report Replay

Builds a ticket offline from reports recorded as JSONL
(one report object per line) and prints it as JSON.

Run: python -m exporter.replay --path reports.jsonl --record
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from app.core.config import settings
from app.core.logging import configure_logging
from exporter.exporter import Exporter
from exporter.ticket import ticket_to_json
from schemas.config import ExporterConfig
from schemas.errors import SchemaViolation

logger = logging.getLogger(__name__)


def load_reports(path: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Load raw reports from a JSONL file.

    Args:
        path: Path to JSONL file
        limit: Maximum number of reports to load (None for all)

    Returns:
        List of report mappings, empty when the file does not exist

    Raises:
        SchemaViolation: a line is not a JSON object
    """
    file_path = Path(path)

    if not file_path.exists():
        logger.warning(f"Report file not found: {file_path}")
        return []

    reports = []
    with open(file_path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                raw = json.loads(line)
            except json.JSONDecodeError as exc:
                raise SchemaViolation(f"{file_path}:{line_number}: invalid JSON ({exc.msg})") from exc
            if not isinstance(raw, dict):
                raise SchemaViolation(f"{file_path}:{line_number}: expected a JSON object")
            reports.append(raw)

            if limit and len(reports) >= limit:
                break

    return reports


def replay(reports: List[Dict[str, Any]], config: ExporterConfig) -> Dict[str, Any]:
    """Feed reports into a fresh exporter and return its ticket."""
    exporter = Exporter(config)
    exporter.start()
    for report in reports:
        exporter.add_report(report)
    exporter.stop()
    return exporter.ticket


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Build a session ticket from recorded reports")
    parser.add_argument("--path", default="reports.jsonl", help="JSONL file path")
    parser.add_argument("--limit", type=int, help="Only replay the first N reports")
    parser.add_argument("--record", action="store_true", help="Include raw reports in the ticket")
    parser.add_argument("--pname", help="Peer connection name")
    parser.add_argument("--cid", help="Call identifier")
    parser.add_argument("--uid", help="User identifier")
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation")
    parser.add_argument("--log-level", default=None, help="Override the configured log level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    overrides = {"record": args.record or settings.default_record, "ticket": True}
    for name in ("pname", "cid", "uid"):
        value = getattr(args, name)
        if value:
            overrides[name] = value

    try:
        reports = load_reports(args.path, args.limit)
        if not reports:
            print("No reports found.", file=sys.stderr)
            return 1

        config = ExporterConfig.from_settings(settings, **overrides)
        ticket = replay(reports, config)
    except SchemaViolation as e:
        logger.error(f"Replay aborted: {e}")
        return 2

    print(ticket_to_json(ticket, indent=args.indent))
    return 0


if __name__ == "__main__":
    sys.exit(main())

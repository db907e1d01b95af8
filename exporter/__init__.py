# Exporter Package
from exporter.assembler import assemble_stream, assemble_streams
from exporter.ticket import VERSION_EXPORTER, build_ticket, ticket_to_json
from exporter.exporter import Exporter

__all__ = [
    "assemble_stream",
    "assemble_streams",
    "VERSION_EXPORTER",
    "build_ticket",
    "ticket_to_json",
    "Exporter",
]

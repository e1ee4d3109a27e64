"""Outbound services."""
from resume_optimizer.services.http_transport import TransportProvider, TransportResponse, Transport
from resume_optimizer.services.completion_client import CompletionClient, parse_envelope

__all__ = [
    "TransportProvider",
    "TransportResponse",
    "Transport",
    "CompletionClient",
    "parse_envelope",
]

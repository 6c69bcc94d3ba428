"""
Data Availability (DA) layer integration for the gateway.

This package provides the client interface, its Celestia and in-memory
backends, and the identifier, commitment and chunk envelope helpers they
share.
"""

from dagateway.core.da.celestia import CelestiaClient
from dagateway.core.da.chunking import dispatch_chunked
from dagateway.core.da.client import DataAvailabilityClient, make_da_client
from dagateway.core.da.errors import (
    BlobTooLargeError,
    CommitmentError,
    ConnectivityError,
    DAError,
    DecodeError,
    EnvelopeCorruptionError,
    NetworkError,
)
from dagateway.core.da.memory import InMemoryClient
from dagateway.core.da.types import DispatchResponse, InclusionData

__all__ = [
    "DataAvailabilityClient",
    "make_da_client",
    "CelestiaClient",
    "InMemoryClient",
    "dispatch_chunked",
    "DispatchResponse",
    "InclusionData",
    "DAError",
    "DecodeError",
    "EnvelopeCorruptionError",
    "BlobTooLargeError",
    "CommitmentError",
    "NetworkError",
    "ConnectivityError",
]

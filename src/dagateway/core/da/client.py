"""
Data availability client interface.

Every backend implements the same small set of operations so the service
layer can program against one interface regardless of where blobs end up.
"""

import copy
import logging
from abc import ABC, abstractmethod
from typing import Optional

from dagateway.core.da.types import DispatchResponse, InclusionData

logger = logging.getLogger(__name__)


class DataAvailabilityClient(ABC):
    """
    Interface for data availability layer clients.

    Implementations must be safe to call from many threads at once and must
    be cheap to clone: a clone shares the underlying storage or connection
    with the original handle.
    """

    @abstractmethod
    def dispatch_blob(self, batch_number: int, data: bytes) -> DispatchResponse:
        """Dispatch a blob to the data availability layer.

        Args:
            batch_number: Batch the blob belongs to
            data: Raw blob content, no implicit chunking is performed

        Returns:
            DispatchResponse: Identifier needed to fetch the blob later

        Raises:
            DAError: On failure, tagged retriable or fatal
        """

    @abstractmethod
    def get_inclusion_data(self, blob_id: str) -> Optional[InclusionData]:
        """Fetch the content for a given blob id.

        Returns:
            Optional[InclusionData]: The content, or None if the id is unknown

        Raises:
            DAError: On failure, tagged retriable or fatal
        """

    @abstractmethod
    def blob_size_limit(self) -> Optional[int]:
        """Maximum size in bytes of a single dispatch, None means no limit."""

    @abstractmethod
    def ping(self) -> bool:
        """Liveness probe. Reports False instead of raising when unreachable."""

    def clone(self) -> "DataAvailabilityClient":
        """Return a new handle sharing this client's storage and connection."""
        return copy.copy(self)


def make_da_client(config) -> DataAvailabilityClient:
    """Build the data availability client selected by ``config.da_backend``.

    Args:
        config: GatewayConfig instance

    Raises:
        ConnectivityError: If the Celestia node cannot be reached
    """
    from dagateway.core.config import DaBackend
    from dagateway.core.da.celestia import CelestiaClient
    from dagateway.core.da.memory import InMemoryClient

    logger.info(f"Creating DA client for backend {config.da_backend.value}")

    if config.da_backend == DaBackend.CELESTIA:
        return CelestiaClient(
            node_url=config.da_node_url,
            auth_token=config.da_auth_token,
            blob_size_limit=config.da_blob_size_limit,
            timeout=config.da_rpc_timeout_seconds,
        )

    return InMemoryClient(config.da_blob_size_limit)

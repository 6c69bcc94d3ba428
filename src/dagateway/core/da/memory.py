"""
In-memory data availability client.

Simulates the DA network inside the process. Blobs are kept in a map shared
by every clone of the client and are lost on restart. Used for tests and as
the default backend when no network is configured.
"""

import logging
import threading
from typing import Dict, Optional

from dagateway.core.da.client import DataAvailabilityClient
from dagateway.core.da.codec import encode_locator
from dagateway.core.da.commitment import create_commitment, via_namespace
from dagateway.core.da.envelope import reconstruct
from dagateway.core.da.errors import BlobTooLargeError
from dagateway.core.da.types import DispatchResponse, InclusionData

logger = logging.getLogger(__name__)

# Local blobs are not included in any block
LOCAL_POSITION = 0


class InMemoryClient(DataAvailabilityClient):
    """Content-addressed blob store living in process memory."""

    def __init__(self, blob_size_limit: int):
        self._storage: Dict[str, bytes] = {}
        self._lock = threading.Lock()
        self._blob_size_limit = blob_size_limit
        self.namespace = via_namespace()

    def _get(self, blob_id: str) -> Optional[bytes]:
        with self._lock:
            return self._storage.get(blob_id.lower())

    def dispatch_blob(self, batch_number: int, data: bytes) -> DispatchResponse:
        data = bytes(data)
        if len(data) > self._blob_size_limit:
            raise BlobTooLargeError(
                f"Blob of {len(data)} bytes exceeds limit of {self._blob_size_limit} bytes"
            )

        commitment = create_commitment(self.namespace, data)
        blob_id = encode_locator(LOCAL_POSITION, commitment)

        with self._lock:
            self._storage[blob_id] = data

        logger.info(
            f"Stored blob for batch {batch_number} in memory: blob_id={blob_id}, size={len(data)}"
        )
        return DispatchResponse(blob_id=blob_id)

    def get_inclusion_data(self, blob_id: str) -> Optional[InclusionData]:
        raw = self._get(blob_id)
        if raw is None:
            logger.warning(f"No blob found in memory for {blob_id}")
            return None

        return InclusionData(data=reconstruct(raw, self._get))

    def blob_size_limit(self) -> Optional[int]:
        return self._blob_size_limit

    def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._storage)

    def __repr__(self) -> str:
        return f"InMemoryClient(blobs={len(self)}, blob_size_limit={self._blob_size_limit})"

"""
Dispatch of blobs larger than a backend's size limit.

The data is split into leaf blobs that each fit the limit. Every leaf is
dispatched on its own and the ordered leaf identifiers are dispatched as a
pointer envelope, whose identifier names the whole logical blob.
"""

import logging
from typing import List

from dagateway.core.da.client import DataAvailabilityClient
from dagateway.core.da.codec import LOCATOR_SIZE
from dagateway.core.da.envelope import ChunkEnvelope, pointer_size
from dagateway.core.da.errors import BlobTooLargeError
from dagateway.core.da.types import DispatchResponse

logger = logging.getLogger(__name__)


def split_blob(data: bytes, chunk_size: int) -> List[bytes]:
    """Split ``data`` into ordered chunks of at most ``chunk_size`` bytes."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    return [data[i:i + chunk_size] for i in range(0, len(data), chunk_size)]


def dispatch_chunked(
    client: DataAvailabilityClient, batch_number: int, data: bytes
) -> DispatchResponse:
    """Dispatch ``data`` through ``client``, chunking it if it exceeds the limit.

    Returns:
        DispatchResponse: Identifier of the plain blob, or of the pointer blob

    Raises:
        BlobTooLargeError: If the pointer envelope itself does not fit. Locator
            sized ids are assumed, so this is raised before any leaf is sent.
        DAError: Any error raised by the underlying dispatches
    """
    limit = client.blob_size_limit()
    if limit is None or len(data) <= limit:
        return client.dispatch_blob(batch_number, data)

    chunks = split_blob(data, limit)
    expected_size = pointer_size(len(chunks), LOCATOR_SIZE)
    if expected_size > limit:
        raise BlobTooLargeError(
            f"Pointer blob of {expected_size} bytes for {len(chunks)} chunks exceeds limit of {limit} bytes"
        )

    logger.info(
        f"Batch {batch_number} is {len(data)} bytes, dispatching as {len(chunks)} chunks"
    )

    blob_ids = []
    for index, chunk in enumerate(chunks):
        response = client.dispatch_blob(batch_number, chunk)
        logger.debug(f"Chunk {index} of batch {batch_number} dispatched: {response.blob_id}")
        blob_ids.append(response.blob_id)

    envelope = ChunkEnvelope.pointer(blob_ids).to_bytes()
    if len(envelope) > limit:
        raise BlobTooLargeError(
            f"Pointer blob of {len(envelope)} bytes for {len(chunks)} chunks exceeds limit of {limit} bytes"
        )

    return client.dispatch_blob(batch_number, envelope)

"""
Chunk envelope for blobs larger than a backend's size limit.

A logical blob that does not fit in one dispatch is split into leaf blobs.
The identifiers of the leaves are stored, in order, inside a pointer blob
wrapped in a ChunkEnvelope. Fetching the pointer blob reassembles the
original content.

Wire layout of an envelope:

    chunk_count   u64 little-endian
    payload_len   u64 little-endian
    payload       payload_len bytes

With ``chunk_count == 1`` the payload is the literal content. Otherwise the
payload is a sequence of ``u32 big-endian length || raw identifier bytes``
entries, one per chunk.
"""

import logging
import struct
from dataclasses import dataclass
from typing import Callable, List, Optional

from dagateway.core.da.codec import hex_to_bytes
from dagateway.core.da.errors import EnvelopeCorruptionError

logger = logging.getLogger(__name__)

_HEADER = struct.Struct("<QQ")
_ID_LEN = struct.Struct(">I")


@dataclass(frozen=True)
class ChunkEnvelope:
    """Self-describing wrapper telling leaf blobs apart from pointer blobs."""

    chunk_count: int
    payload: bytes

    @property
    def is_pointer(self) -> bool:
        return self.chunk_count > 1

    def to_bytes(self) -> bytes:
        return _HEADER.pack(self.chunk_count, len(self.payload)) + self.payload

    @classmethod
    def from_bytes(cls, raw: bytes) -> Optional["ChunkEnvelope"]:
        """Parse an envelope, returning None if ``raw`` is not one."""
        if len(raw) < _HEADER.size:
            return None

        chunk_count, payload_len = _HEADER.unpack_from(raw)
        if chunk_count < 1 or payload_len != len(raw) - _HEADER.size:
            return None

        return cls(chunk_count=chunk_count, payload=bytes(raw[_HEADER.size:]))

    @classmethod
    def pointer(cls, blob_ids: List[str]) -> "ChunkEnvelope":
        """Build a pointer envelope referencing ``blob_ids`` in order."""
        return cls(chunk_count=len(blob_ids), payload=serialize_blob_ids(blob_ids))


def pointer_size(chunk_count: int, id_size: int) -> int:
    """Serialized size of a pointer to ``chunk_count`` ids of ``id_size`` raw bytes."""
    return _HEADER.size + chunk_count * (_ID_LEN.size + id_size)


def serialize_blob_ids(blob_ids: List[str]) -> bytes:
    """Serialize hex identifiers as length-prefixed raw bytes."""
    parts = []
    for blob_id in blob_ids:
        raw = hex_to_bytes(blob_id)
        parts.append(_ID_LEN.pack(len(raw)))
        parts.append(raw)
    return b"".join(parts)


def deserialize_blob_ids(data: bytes) -> List[str]:
    """Inverse of :func:`serialize_blob_ids`.

    Raises:
        EnvelopeCorruptionError: If an entry is truncated
    """
    blob_ids = []
    pos = 0
    while pos < len(data):
        if pos + _ID_LEN.size > len(data):
            raise EnvelopeCorruptionError("Truncated blob id length prefix")
        (length,) = _ID_LEN.unpack_from(data, pos)
        pos += _ID_LEN.size

        if pos + length > len(data):
            raise EnvelopeCorruptionError(
                f"Blob id entry of {length} bytes overruns the payload"
            )
        blob_ids.append(data[pos:pos + length].hex())
        pos += length

    return blob_ids


def reconstruct(raw: bytes, lookup: Callable[[str], Optional[bytes]]) -> bytes:
    """Return the logical content stored in ``raw``.

    Raw bytes that do not parse as an envelope are returned unchanged. A
    pointer envelope is resolved one level deep through ``lookup``.

    Raises:
        EnvelopeCorruptionError: If the pointer is inconsistent or references
            a missing leaf
    """
    envelope = ChunkEnvelope.from_bytes(raw)
    if envelope is None:
        return raw
    if not envelope.is_pointer:
        return envelope.payload

    blob_ids = deserialize_blob_ids(envelope.payload)
    if len(blob_ids) != envelope.chunk_count:
        raise EnvelopeCorruptionError(
            f"Mismatch, blob ids len [{len(blob_ids)}] != chunk size [{envelope.chunk_count}]"
        )

    parts = []
    for blob_id in blob_ids:
        leaf = lookup(blob_id)
        if leaf is None:
            logger.error(f"Pointer blob references missing leaf {blob_id}")
            raise EnvelopeCorruptionError(f"Failed to get blob {blob_id}")
        parts.append(leaf)

    return b"".join(parts)

"""
Blob identifier encoding.

A locator identifier is the big-endian 8-byte network position (block
height) followed by the 32-byte blob commitment, hex encoded in lowercase.
"""

import binascii
from typing import Tuple

from dagateway.core.da.errors import DecodeError

POSITION_SIZE = 8
COMMITMENT_SIZE = 32
LOCATOR_SIZE = POSITION_SIZE + COMMITMENT_SIZE

MAX_POSITION = (1 << 64) - 1


def encode_locator(position: int, commitment: bytes) -> str:
    """Encode a network position and commitment into a blob identifier.

    Args:
        position: Network position, must fit in an unsigned 64-bit integer
        commitment: 32-byte commitment

    Returns:
        str: 80 lowercase hex characters
    """
    if not 0 <= position <= MAX_POSITION:
        raise ValueError(f"Position {position} does not fit in 64 bits")
    if len(commitment) != COMMITMENT_SIZE:
        raise ValueError(
            f"Commitment must be {COMMITMENT_SIZE} bytes, got {len(commitment)}"
        )

    return (position.to_bytes(POSITION_SIZE, "big") + bytes(commitment)).hex()


def decode_locator(blob_id: str) -> Tuple[int, bytes]:
    """Decode a blob identifier into its position and commitment.

    Bytes after the first 40 are ignored.

    Raises:
        DecodeError: If the identifier is not hex or is shorter than 40 bytes
    """
    raw = hex_to_bytes(blob_id)

    if len(raw) < LOCATOR_SIZE:
        raise DecodeError(
            f"Blob id is {len(raw)} bytes, expected at least {LOCATOR_SIZE}"
        )

    position = int.from_bytes(raw[:POSITION_SIZE], "big")
    commitment = raw[POSITION_SIZE:LOCATOR_SIZE]
    return position, commitment


def hex_to_bytes(blob_id: str) -> bytes:
    """Hex-decode an identifier, raising DecodeError on bad input."""
    try:
        return binascii.unhexlify(blob_id)
    except (binascii.Error, ValueError, TypeError) as e:
        raise DecodeError(f"Invalid blob id {blob_id!r}: {e}") from e

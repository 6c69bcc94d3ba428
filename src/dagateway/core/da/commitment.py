"""
Blob commitment for the data availability clients.

This module computes the share commitment used by Celestia to identify a
blob inside a block: the blob is split into namespaced shares, the shares
are grouped into Merkle mountain ranges, each range is hashed as a
Namespaced Merkle Tree (NMT), and the NMT roots are combined into a single
RFC 6962 Merkle root.

Any verifier holding the namespace, the blob bytes and the share version
can reproduce the same 32-byte value.
"""

import hashlib
import math
from dataclasses import dataclass
from typing import List, Sequence

from dagateway.core.da.errors import CommitmentError

SHARE_SIZE = 512
NAMESPACE_VERSION_SIZE = 1
NAMESPACE_ID_SIZE = 28
NAMESPACE_SIZE = NAMESPACE_VERSION_SIZE + NAMESPACE_ID_SIZE
NAMESPACE_V0_ID_SIZE = 10
SHARE_INFO_BYTES = 1
SEQUENCE_LEN_BYTES = 4

FIRST_SHARE_CONTENT_SIZE = (
    SHARE_SIZE - NAMESPACE_SIZE - SHARE_INFO_BYTES - SEQUENCE_LEN_BYTES
)
CONTINUATION_SHARE_CONTENT_SIZE = SHARE_SIZE - NAMESPACE_SIZE - SHARE_INFO_BYTES

SHARE_VERSION_ZERO = 0
SUBTREE_ROOT_THRESHOLD = 64

LEAF_PREFIX = b"\x00"
NODE_PREFIX = b"\x01"

# Tag all blobs of this gateway are published under
VIA_NAMESPACE_TAG = b"VIA" + b"\x00" * 5


@dataclass(frozen=True)
class Namespace:
    """A 29-byte namespace: one version byte followed by a 28-byte id."""

    raw: bytes

    def __post_init__(self):
        if len(self.raw) != NAMESPACE_SIZE:
            raise CommitmentError(
                f"Namespace must be {NAMESPACE_SIZE} bytes, got {len(self.raw)}"
            )

    @classmethod
    def v0(cls, namespace_id: bytes) -> "Namespace":
        """Build a version 0 namespace from up to 10 bytes of user id.

        The id is left-padded with zeros to 10 bytes and prefixed with the
        18 zero bytes version 0 reserves.
        """
        if len(namespace_id) > NAMESPACE_V0_ID_SIZE:
            raise CommitmentError(
                f"Version 0 namespace id must be at most {NAMESPACE_V0_ID_SIZE} bytes"
            )
        padded_id = namespace_id.rjust(NAMESPACE_V0_ID_SIZE, b"\x00")
        reserved = b"\x00" * (NAMESPACE_ID_SIZE - NAMESPACE_V0_ID_SIZE)
        return cls(b"\x00" + reserved + padded_id)

    @property
    def version(self) -> int:
        return self.raw[0]

    def hex(self) -> str:
        return self.raw.hex()


PARITY_NAMESPACE = Namespace(b"\xff" * NAMESPACE_SIZE)


def via_namespace() -> Namespace:
    """Namespace used by both backends of this gateway."""
    return Namespace.v0(VIA_NAMESPACE_TAG)


def round_up_power_of_two(n: int) -> int:
    result = 1
    while result < n:
        result <<= 1
    return result


def round_down_power_of_two(n: int) -> int:
    if n <= 0:
        raise ValueError("value must be positive")
    return 1 << (n.bit_length() - 1)


def blob_min_square_size(share_count: int) -> int:
    """Smallest square width able to hold a blob of ``share_count`` shares."""
    if share_count <= 1:
        return 1
    # ceil(sqrt(n)) without floating point
    return round_up_power_of_two(math.isqrt(share_count - 1) + 1)


def subtree_width(share_count: int, threshold: int = SUBTREE_ROOT_THRESHOLD) -> int:
    """Maximum width of the subtrees a blob's commitment is built from."""
    s = share_count // threshold
    if share_count % threshold != 0:
        s += 1
    s = round_up_power_of_two(s)
    return min(s, blob_min_square_size(share_count))


def merkle_mountain_range_sizes(total_size: int, max_tree_size: int) -> List[int]:
    """Split ``total_size`` leaves into perfect trees of at most ``max_tree_size``."""
    sizes = []
    while total_size != 0:
        if total_size >= max_tree_size:
            tree_size = max_tree_size
        else:
            tree_size = round_down_power_of_two(total_size)
        sizes.append(tree_size)
        total_size -= tree_size
    return sizes


def split_shares(
    namespace: Namespace, data: bytes, share_version: int = SHARE_VERSION_ZERO
) -> List[bytes]:
    """Split blob data into 512-byte sparse shares.

    The first share carries the sequence start flag and the big-endian
    length of the whole blob; the last share is zero padded.
    """
    if share_version != SHARE_VERSION_ZERO:
        raise CommitmentError(f"Unsupported share version {share_version}")

    shares = []
    first_info = bytes([(share_version << 1) | 1])
    continuation_info = bytes([share_version << 1])

    chunk = data[:FIRST_SHARE_CONTENT_SIZE]
    share = namespace.raw + first_info + len(data).to_bytes(SEQUENCE_LEN_BYTES, "big") + chunk
    shares.append(share.ljust(SHARE_SIZE, b"\x00"))

    offset = FIRST_SHARE_CONTENT_SIZE
    while offset < len(data):
        chunk = data[offset:offset + CONTINUATION_SHARE_CONTENT_SIZE]
        share = namespace.raw + continuation_info + chunk
        shares.append(share.ljust(SHARE_SIZE, b"\x00"))
        offset += CONTINUATION_SHARE_CONTENT_SIZE

    return shares


def _split_point(length: int) -> int:
    """Largest power of two strictly less than ``length``."""
    k = round_down_power_of_two(length)
    if k == length:
        k >>= 1
    return k


def _nmt_leaf(leaf: bytes) -> bytes:
    ns = leaf[:NAMESPACE_SIZE]
    return ns + ns + hashlib.sha256(LEAF_PREFIX + leaf).digest()


def _nmt_node(left: bytes, right: bytes) -> bytes:
    left_min, left_max = left[:NAMESPACE_SIZE], left[NAMESPACE_SIZE:2 * NAMESPACE_SIZE]
    right_min, right_max = right[:NAMESPACE_SIZE], right[NAMESPACE_SIZE:2 * NAMESPACE_SIZE]

    min_ns = min(left_min, right_min)
    if right_min == PARITY_NAMESPACE.raw:
        max_ns = left_max
    else:
        max_ns = max(left_max, right_max)

    return min_ns + max_ns + hashlib.sha256(NODE_PREFIX + left + right).digest()


def nmt_root(leaves: Sequence[bytes]) -> bytes:
    """Root of a Namespaced Merkle Tree over namespace-prefixed leaves."""
    if not leaves:
        raise CommitmentError("Cannot build a namespaced merkle tree without leaves")
    if len(leaves) == 1:
        return _nmt_leaf(leaves[0])
    k = _split_point(len(leaves))
    return _nmt_node(nmt_root(leaves[:k]), nmt_root(leaves[k:]))


def merkle_root(items: Sequence[bytes]) -> bytes:
    """RFC 6962 Merkle root over arbitrary byte strings."""
    if not items:
        return hashlib.sha256(b"").digest()
    if len(items) == 1:
        return hashlib.sha256(LEAF_PREFIX + items[0]).digest()
    k = _split_point(len(items))
    left = merkle_root(items[:k])
    right = merkle_root(items[k:])
    return hashlib.sha256(NODE_PREFIX + left + right).digest()


def create_commitment(
    namespace: Namespace,
    data: bytes,
    share_version: int = SHARE_VERSION_ZERO,
    threshold: int = SUBTREE_ROOT_THRESHOLD,
) -> bytes:
    """Compute the 32-byte commitment of ``data`` published under ``namespace``.

    Args:
        namespace: Namespace the blob is published under
        data: Blob content
        share_version: Share format version (only 0 is supported)
        threshold: Subtree root threshold of the network's app version

    Returns:
        bytes: 32-byte commitment

    Raises:
        CommitmentError: If the inputs cannot be committed to
    """
    shares = split_shares(namespace, bytes(data), share_version)
    width = subtree_width(len(shares), threshold)

    subtree_roots = []
    cursor = 0
    for tree_size in merkle_mountain_range_sizes(len(shares), width):
        leaves = [namespace.raw + share for share in shares[cursor:cursor + tree_size]]
        subtree_roots.append(nmt_root(leaves))
        cursor += tree_size

    return merkle_root(subtree_roots)

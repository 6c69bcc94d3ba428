"""
Tests for the blob commitment.
"""
import hashlib

import pytest

from dagateway.core.da.commitment import (
    CONTINUATION_SHARE_CONTENT_SIZE,
    FIRST_SHARE_CONTENT_SIZE,
    NAMESPACE_SIZE,
    SHARE_SIZE,
    Namespace,
    create_commitment,
    merkle_mountain_range_sizes,
    merkle_root,
    split_shares,
    subtree_width,
    via_namespace,
)
from dagateway.core.da.errors import CommitmentError


@pytest.fixture
def namespace():
    return via_namespace()


def _sha(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def test_via_namespace_layout(namespace):
    """The gateway tag is left-padded into a version 0 namespace."""
    assert len(namespace.raw) == NAMESPACE_SIZE
    assert namespace.version == 0
    assert namespace.raw == b"\x00" * 21 + b"VIA" + b"\x00" * 5


def test_namespace_v0_rejects_long_id():
    with pytest.raises(CommitmentError):
        Namespace.v0(b"x" * 11)


def test_namespace_rejects_wrong_size():
    with pytest.raises(CommitmentError):
        Namespace(b"\x00" * 28)


@pytest.mark.parametrize(
    "size,expected",
    [
        (0, 1),
        (1, 1),
        (FIRST_SHARE_CONTENT_SIZE, 1),
        (FIRST_SHARE_CONTENT_SIZE + 1, 2),
        (FIRST_SHARE_CONTENT_SIZE + CONTINUATION_SHARE_CONTENT_SIZE, 2),
        (FIRST_SHARE_CONTENT_SIZE + CONTINUATION_SHARE_CONTENT_SIZE + 1, 3),
    ],
)
def test_split_share_count(namespace, size, expected):
    shares = split_shares(namespace, b"\xab" * size)
    assert len(shares) == expected
    assert all(len(share) == SHARE_SIZE for share in shares)


def test_split_share_layout(namespace):
    """First share carries the start flag and blob length, the rest do not."""
    data = bytes(range(256)) * 3
    shares = split_shares(namespace, data)

    first = shares[0]
    assert first[:NAMESPACE_SIZE] == namespace.raw
    assert first[NAMESPACE_SIZE] == 1
    assert int.from_bytes(first[30:34], "big") == len(data)
    assert first[34:] == data[:FIRST_SHARE_CONTENT_SIZE]

    second = shares[1]
    assert second[:NAMESPACE_SIZE] == namespace.raw
    assert second[NAMESPACE_SIZE] == 0
    remainder = data[FIRST_SHARE_CONTENT_SIZE:]
    assert second[30:30 + len(remainder)] == remainder
    assert second[30 + len(remainder):] == b"\x00" * (SHARE_SIZE - 30 - len(remainder))


def test_split_rejects_unknown_share_version(namespace):
    with pytest.raises(CommitmentError):
        split_shares(namespace, b"data", share_version=1)


@pytest.mark.parametrize(
    "share_count,expected",
    [(1, 1), (64, 1), (65, 2), (4096, 64), (10000, 128)],
)
def test_subtree_width(share_count, expected):
    assert subtree_width(share_count) == expected


def test_merkle_mountain_range_sizes():
    assert merkle_mountain_range_sizes(11, 4) == [4, 4, 2, 1]
    assert merkle_mountain_range_sizes(3, 1) == [1, 1, 1]
    assert merkle_mountain_range_sizes(8, 8) == [8]
    assert merkle_mountain_range_sizes(0, 4) == []


def test_merkle_root_empty_and_single():
    assert merkle_root([]) == _sha(b"")
    assert merkle_root([b"leaf"]) == _sha(b"\x00" + b"leaf")


def test_single_share_commitment(namespace):
    """A one-share blob commits to the hash of its single NMT leaf."""
    share = split_shares(namespace, b"hello")[0]
    leaf = namespace.raw + share
    nmt_leaf = namespace.raw + namespace.raw + _sha(b"\x00" + leaf)

    assert create_commitment(namespace, b"hello") == _sha(b"\x00" + nmt_leaf)


def test_two_share_commitment(namespace):
    """Two shares form two width-1 subtrees combined by the Merkle root."""
    data = b"\x42" * (FIRST_SHARE_CONTENT_SIZE + 10)
    roots = []
    for share in split_shares(namespace, data):
        leaf = namespace.raw + share
        roots.append(namespace.raw + namespace.raw + _sha(b"\x00" + leaf))

    expected = _sha(b"\x01" + _sha(b"\x00" + roots[0]) + _sha(b"\x00" + roots[1]))
    assert create_commitment(namespace, data) == expected


def test_commitment_is_deterministic(namespace):
    data = b"rollup batch" * 500
    first = create_commitment(namespace, data)

    assert len(first) == 32
    assert create_commitment(via_namespace(), data) == first


def test_commitment_binds_content_and_namespace(namespace):
    base = create_commitment(namespace, b"payload")

    assert create_commitment(namespace, b"payloae") != base
    assert create_commitment(Namespace.v0(b"OTHER"), b"payload") != base


def test_commitment_of_empty_blob(namespace):
    assert len(create_commitment(namespace, b"")) == 32

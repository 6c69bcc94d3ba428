"""
Error types for the data availability clients.

Every failure raised by a client carries a ``retriable`` flag. The clients
never retry on their own; callers use the flag to decide whether a retry
makes sense.
"""


class DAError(Exception):
    """Base error returned by data availability clients."""

    retriable = False

    def __init__(self, cause, retriable=None):
        self.cause = cause
        if retriable is not None:
            self.retriable = retriable
        super().__init__(str(cause))

    def is_retriable(self) -> bool:
        return self.retriable

    def __str__(self) -> str:
        kind = "retriable" if self.retriable else "fatal"
        return f"{kind} data availability client error: {self.cause}"


class DecodeError(DAError):
    """Malformed blob identifier (bad hex or too short)."""


class EnvelopeCorruptionError(DAError):
    """Pointer blob whose identifier list is unreadable, mismatched or dangling."""


class BlobTooLargeError(DAError):
    """Blob exceeds the size limit advertised by the backend."""


class CommitmentError(DAError):
    """Commitment could not be computed for the given inputs."""


class NetworkError(DAError):
    """Transient failure talking to the external DA network."""

    retriable = True


class ConnectivityError(DAError):
    """Backend could not be constructed because the network is unreachable."""

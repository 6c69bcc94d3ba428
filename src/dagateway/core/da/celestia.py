"""
Celestia client for the data availability gateway.

This module provides a client that publishes blobs to a Celestia light
node over its JSON-RPC API and fetches them back by height and commitment.
"""

import base64
import binascii
import itertools
import logging
from typing import Any, Dict, List, Optional

import requests

from dagateway.core.da.client import DataAvailabilityClient
from dagateway.core.da.codec import decode_locator, encode_locator
from dagateway.core.da.commitment import (
    SHARE_VERSION_ZERO,
    Namespace,
    create_commitment,
    via_namespace,
)
from dagateway.core.da.envelope import reconstruct
from dagateway.core.da.errors import (
    BlobTooLargeError,
    ConnectivityError,
    DAError,
    NetworkError,
)
from dagateway.core.da.types import DispatchResponse, InclusionData

logger = logging.getLogger(__name__)

# A negative gas price makes the node estimate the price for the blob
GAS_PRICE = -1.0

BLOB_NOT_FOUND = "blob: not found"


class RpcError(Exception):
    """Error object returned by the node in a JSON-RPC response."""

    def __init__(self, method: str, code: Optional[int], message: str):
        self.method = method
        self.code = code
        self.message = message
        super().__init__(f"{method} failed ({code}): {message}")

    @property
    def is_not_found(self) -> bool:
        return BLOB_NOT_FOUND in self.message


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _http_url(node_url: str) -> str:
    """Normalize a node URL to the HTTP endpoint the JSON-RPC API listens on."""
    if node_url.startswith("ws://"):
        return "http://" + node_url[len("ws://"):]
    if node_url.startswith("wss://"):
        return "https://" + node_url[len("wss://"):]
    if not node_url.startswith(("http://", "https://")):
        return f"http://{node_url}"
    return node_url


class CelestiaRpc:
    """
    Minimal JSON-RPC transport for a Celestia light node.

    A single session is shared by every clone of the owning client; the
    session handles connection pooling for concurrent callers.
    """

    def __init__(self, node_url: str, auth_token: str, timeout: float = 30.0):
        self.url = _http_url(node_url)
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Content-Type": "application/json",
                "Authorization": f"Bearer {auth_token}",
            }
        )
        self._ids = itertools.count(1)

    def call(self, method: str, params: List[Any]) -> Any:
        """Invoke ``method`` and return its result.

        Raises:
            requests.RequestException: On transport or HTTP failures
            RpcError: If the node answers with an error object
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        response = self.session.post(self.url, json=payload, timeout=self.timeout)
        response.raise_for_status()
        body = response.json()
        if not isinstance(body, dict):
            raise RpcError(method, None, f"unexpected response body: {body!r}")

        error = body.get("error")
        if error:
            if not isinstance(error, dict):
                raise RpcError(method, None, str(error))
            raise RpcError(method, error.get("code"), error.get("message", str(error)))
        if "result" not in body:
            raise RpcError(method, None, "response carries no result")
        return body["result"]

    def p2p_info(self) -> Dict[str, Any]:
        return self.call("p2p.Info", [])

    def header_network_head(self) -> Dict[str, Any]:
        return self.call("header.NetworkHead", [])

    def blob_submit(self, blobs: List[Dict[str, Any]], tx_config: Dict[str, Any]) -> int:
        height = self.call("blob.Submit", [blobs, tx_config])
        try:
            return int(height)
        except (TypeError, ValueError) as e:
            raise RpcError("blob.Submit", None, f"invalid height {height!r}") from e

    def blob_get(self, height: int, namespace: Namespace, commitment: bytes) -> Dict[str, Any]:
        return self.call("blob.Get", [height, _b64(namespace.raw), _b64(commitment)])

    def close(self):
        self.session.close()


class CelestiaClient(DataAvailabilityClient):
    """
    Client for the Celestia Data Availability layer.

    Blobs are submitted under the gateway namespace and identified by the
    height they were included at plus their share commitment.
    """

    def __init__(
        self,
        node_url: str,
        auth_token: str,
        blob_size_limit: int,
        timeout: float = 30.0,
        rpc: Optional[CelestiaRpc] = None,
    ):
        """Connect to a Celestia node.

        Args:
            node_url: URL of the Celestia light node
            auth_token: Auth token for the node
            blob_size_limit: Maximum size of a single blob in bytes
            timeout: Seconds to wait for each RPC call
            rpc: Optional transport, created from ``node_url`` if None

        Raises:
            ConnectivityError: If the node does not answer the connectivity check
        """
        self.light_node_url = node_url
        self.rpc = rpc or CelestiaRpc(node_url, auth_token, timeout)
        self._blob_size_limit = blob_size_limit
        self.namespace = via_namespace()

        try:
            self.rpc.p2p_info()
        except (requests.RequestException, RpcError, ValueError) as e:
            logger.error(f"Failed to connect to Celestia node at {node_url}: {str(e)}")
            raise ConnectivityError(f"Failed to create a client: {e}") from e

        logger.info(
            f"Celestia client initialized with namespace={self.namespace.hex()}"
        )

    def dispatch_blob(self, batch_number: int, data: bytes) -> DispatchResponse:
        data = bytes(data)
        if len(data) > self._blob_size_limit:
            raise BlobTooLargeError(
                f"Blob of {len(data)} bytes exceeds limit of {self._blob_size_limit} bytes"
            )

        commitment = create_commitment(self.namespace, data, SHARE_VERSION_ZERO)
        blob = {
            "namespace": _b64(self.namespace.raw),
            "data": _b64(data),
            "share_version": SHARE_VERSION_ZERO,
            "commitment": _b64(commitment),
            "index": -1,
        }
        tx_config = {"gas_price": GAS_PRICE, "is_gas_price_set": True}

        try:
            height = self.rpc.blob_submit([blob], tx_config)
        except (requests.RequestException, RpcError, ValueError) as e:
            logger.error(f"Error submitting blob for batch {batch_number} to Celestia: {str(e)}")
            raise NetworkError(f"Error to submit blob: {e}") from e

        blob_id = encode_locator(height, commitment)
        logger.info(
            f"Batch {batch_number} submitted to Celestia at height {height}: blob_id={blob_id}"
        )
        return DispatchResponse(blob_id=blob_id)

    def get_inclusion_data(self, blob_id: str) -> Optional[InclusionData]:
        raw = self._fetch_raw(blob_id)
        if raw is None:
            return None

        return InclusionData(data=reconstruct(raw, self._fetch_raw))

    def _fetch_raw(self, blob_id: str) -> Optional[bytes]:
        """Fetch the stored bytes of one blob, or None if the node has none."""
        height, commitment = decode_locator(blob_id)

        try:
            blob = self.rpc.blob_get(height, self.namespace, commitment)
        except RpcError as e:
            if e.is_not_found:
                logger.warning(f"No blob found on Celestia for {blob_id}")
                return None
            logger.error(f"Error fetching blob {blob_id} from Celestia: {str(e)}")
            raise NetworkError(f"Error to get blob: {e}") from e
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error fetching blob {blob_id} from Celestia: {str(e)}")
            raise NetworkError(f"Error to get blob: {e}") from e

        if not blob:
            logger.warning(f"No blob found on Celestia for {blob_id}")
            return None

        try:
            return base64.b64decode(blob["data"], validate=True)
        except (KeyError, TypeError, binascii.Error) as e:
            raise DAError(f"Malformed blob returned for {blob_id}: {e}") from e

    def blob_size_limit(self) -> Optional[int]:
        return self._blob_size_limit

    def ping(self) -> bool:
        try:
            self.rpc.header_network_head()
        except (requests.RequestException, RpcError, ValueError) as e:
            logger.warning(f"Celestia node at {self.light_node_url} is unreachable: {str(e)}")
            return False
        return True

    def __repr__(self) -> str:
        return f"CelestiaClient(light_node_url={self.light_node_url!r})"

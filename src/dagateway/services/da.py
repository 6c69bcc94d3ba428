import logging
import time
from typing import Optional

from dagateway.core.da.client import DataAvailabilityClient
from dagateway.core.da.types import DispatchResponse, InclusionData
from dagateway.core.metrics import DaMetrics

logger = logging.getLogger(__name__)


class DaService:
    """
    Front of the data availability client used by the HTTP handlers.

    Records dispatch and inclusion metrics on the injected metrics handle.
    Errors raised by the client propagate unchanged so callers can read
    their retriable flag.
    """

    def __init__(self, da_client: DataAvailabilityClient, metrics: Optional[DaMetrics] = None):
        self.da_client = da_client
        self.metrics = metrics or DaMetrics()

    def dispatch_blob(self, batch_number: int, data: bytes) -> DispatchResponse:
        """Dispatch a blob to the data availability layer."""
        start = time.perf_counter()
        response = self.da_client.dispatch_blob(batch_number, data)

        self.metrics.dispatched_blobs.inc()
        self.metrics.dispatch_latency.observe(time.perf_counter() - start)

        return response

    def get_inclusion_data(self, blob_id: str) -> Optional[InclusionData]:
        """Fetch the inclusion data for a given blob id."""
        response = self.da_client.get_inclusion_data(blob_id)

        self.metrics.inclusion_queries.inc()

        return response

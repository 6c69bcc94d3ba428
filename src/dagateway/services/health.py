from pydantic import BaseModel

from dagateway.core.da.client import DataAvailabilityClient


class ServiceStatus(BaseModel):
    status: bool
    message: str


class HealthCheckResponse(BaseModel):
    da: ServiceStatus


class HealthCheckService:
    """Aggregates the liveness of the gateway's dependencies."""

    def __init__(self, da_client: DataAvailabilityClient):
        self.da_client = da_client

    def health_check(self) -> HealthCheckResponse:
        healthy = self.da_client.ping()
        message = (
            "Data availability is healthy"
            if healthy
            else "Data availability layer is unreachable"
        )
        return HealthCheckResponse(da=ServiceStatus(status=healthy, message=message))

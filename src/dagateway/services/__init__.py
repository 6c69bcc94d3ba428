"""
Services wrapping the data availability client for the HTTP layer.
"""

from dagateway.services.da import DaService
from dagateway.services.health import HealthCheckResponse, HealthCheckService, ServiceStatus

__all__ = ["DaService", "HealthCheckService", "HealthCheckResponse", "ServiceStatus"]

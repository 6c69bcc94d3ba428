"""
Command-line interface for the DA gateway.

This script starts the HTTP gateway in front of the configured data
availability backend and offers a quick liveness check for operators.
"""
import logging
import sys

import dotenv
import typer
import uvicorn
from pydantic import ValidationError

from dagateway.api.app import build_app
from dagateway.core.config import load_config_from_env
from dagateway.core.da.client import make_da_client
from dagateway.core.da.errors import ConnectivityError
from dagateway.core.metrics import DaMetrics

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("dagateway.cli")

app = typer.Typer(help="Data availability gateway")


def _load_config():
    dotenv.load_dotenv()
    try:
        return load_config_from_env()
    except (ValidationError, ValueError) as e:
        logger.error(f"Invalid configuration: {str(e)}")
        raise typer.Exit(code=1)


@app.command()
def serve(
    metrics: bool = typer.Option(True, help="Expose Prometheus metrics on METRICS_PORT"),
):
    """Run the gateway HTTP server."""
    config = _load_config()
    logger.info(f"Start with DA backend {config.da_backend.value}")

    da_metrics = DaMetrics()
    try:
        gateway = build_app(config, da_metrics)
    except ConnectivityError as e:
        logger.error(f"Failed to start gateway: {str(e)}")
        raise typer.Exit(code=1)

    if metrics:
        da_metrics.serve(config.metrics_port, config.host)
        logger.info(f"Metrics exporter listening on {config.host}:{config.metrics_port}")

    logger.info(f"Server listening on {config.app_address}")
    uvicorn.run(gateway, host=config.host, port=config.port, log_level="info")


@app.command()
def ping():
    """Check whether the configured DA backend is reachable."""
    config = _load_config()
    try:
        client = make_da_client(config)
    except ConnectivityError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(code=1)

    if client.ping():
        typer.echo(f"✅ {config.da_backend.value} backend is reachable")
    else:
        typer.echo(f"❌ {config.da_backend.value} backend is unreachable")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()

"""
Pytest configuration for the DA gateway tests.

This file helps pytest find and run tests correctly by setting up the Python path
and shared fixtures.
"""

import os
import sys

import pytest

# Add the source directory to the Python path to help with imports
src_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if src_root not in sys.path:
    sys.path.insert(0, src_root)

from dagateway.core.da.memory import InMemoryClient  # noqa: E402
from dagateway.core.metrics import DaMetrics  # noqa: E402


@pytest.fixture
def memory_client():
    """Create a fresh in-memory client with a 1 KiB limit."""
    return InMemoryClient(1024)


@pytest.fixture
def metrics():
    """Create a metrics handle on its own registry."""
    return DaMetrics()

"""
pytest configuration and fixtures.

Author: Risk Service Team
Version: 1.0.0
"""

import pytest
from unittest.mock import AsyncMock

from riskservice.integrations.fhir_client import FHIRClient
from riskservice.plugins.cha2ds2_vasc import CHA2DS2VAScPlugin
from riskservice.plugins.simple import SimplePlugin
from riskservice.storage.pie_store import PieStore


@pytest.fixture
def chads_plugin():
    """CHA2DS2-VASc plugin with the published stroke risk table."""
    return CHA2DS2VAScPlugin()


@pytest.fixture
def simple_plugin():
    """Simple conditions + medications plugin."""
    return SimplePlugin()


@pytest.fixture
def pie_store():
    """Pie store on the in-memory backend."""
    return PieStore()


@pytest.fixture
def mock_publisher():
    """Publisher that accepts every transaction."""
    publisher = AsyncMock()
    publisher.post_transaction.return_value = None
    return publisher


@pytest.fixture
def mock_fhir_client():
    """Mock FHIRClient for testing."""
    client = AsyncMock(spec=FHIRClient)
    client.post_transaction.return_value = None
    return client

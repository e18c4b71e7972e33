"""
Shared pytest fixtures and configuration for gridpager tests.

This module provides common fixtures used across the unit tests,
including a fresh tracker, a mocked boto3 client and sample rows.
"""

import os
from typing import TYPE_CHECKING, Any
from unittest.mock import MagicMock

import pytest

from gridpager import ContinuationTokenPaging, InMemoryTableSource, TableRequest, TableResponse

if TYPE_CHECKING:
    from tests.helpers.localstack import LocalStackHelper


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line("markers", "integration: Integration tests against LocalStack")


@pytest.fixture
def paging() -> ContinuationTokenPaging:
    """A freshly constructed tracker."""
    return ContinuationTokenPaging()


@pytest.fixture
def mock_client():
    """
    Creates a fully mocked boto3 DynamoDB client.

    Tests set ``mock_client.scan.return_value`` / ``side_effect`` as needed.
    """
    client = MagicMock()
    client.scan.return_value = {"Items": []}
    return client


@pytest.fixture
def sample_rows() -> list[dict[str, Any]]:
    """25 employee rows: two full pages of 10 and a last page of 5."""
    departments = ["Engineering", "Marketing", "Sales", "HR", "Finance"]
    return [
        {
            "id": i,
            "name": f"Employee {i:02d}",
            "department": departments[i % len(departments)],
            "status": "Active" if i % 3 else "On Leave",
        }
        for i in range(25)
    ]


@pytest.fixture
def memory_source(sample_rows) -> InMemoryTableSource:
    return InMemoryTableSource(sample_rows)


class RecordingSource:
    """Wraps a source and records every request it receives."""

    def __init__(self, source):
        self.source = source
        self.requests: list[TableRequest] = []

    def __call__(self, request: TableRequest) -> TableResponse:
        self.requests.append(request)
        return self.source(request)


@pytest.fixture
def recording_source(memory_source) -> RecordingSource:
    return RecordingSource(memory_source)


@pytest.fixture
def unknown_total_source(memory_source) -> RecordingSource:
    """Like memory_source but never reports totals, as a cursor-only backend would."""

    def fetch(request: TableRequest) -> TableResponse:
        response = memory_source(request)
        return response.model_copy(update={"total_records": 0, "total_filtered_records": 0})

    return RecordingSource(fetch)


# Integration Test Fixtures


@pytest.fixture(scope="session")
def localstack_endpoint() -> str:
    """Get LocalStack endpoint URL from environment or default."""
    return os.getenv("LOCALSTACK_ENDPOINT", "http://localhost:4566")


@pytest.fixture(scope="session")
def localstack_helper(localstack_endpoint: str) -> "LocalStackHelper":
    """Provides a LocalStackHelper, skipping the test when LocalStack is not running."""
    from tests.helpers.localstack import LocalStackHelper

    helper = LocalStackHelper(endpoint_url=localstack_endpoint)
    if not helper.is_available():
        pytest.skip(f"LocalStack not reachable at {localstack_endpoint}")
    return helper


@pytest.fixture
def employees_table(localstack_helper, sample_rows):
    """
    Creates and seeds an employees table, deleting it after the test.

    Yields the table name.
    """
    table_name = "integration_test_employees"
    localstack_helper.create_table(table_name, pk_name="id", pk_type="N")
    localstack_helper.seed(table_name, sample_rows)

    yield table_name

    localstack_helper.delete_table(table_name)

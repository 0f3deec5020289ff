from __future__ import annotations

import pytest

from replimongo.config import ReplicationConfig
from replimongo.ops.models import OperationDescriptor, OperationKind
from replimongo.replica.registry import StaticEndpointRegistry
from tests.fakes import FakeClientFactory


def url_for(target: str) -> str:
    return f"mongodb://{target}.example:27017"


@pytest.fixture
def config() -> ReplicationConfig:
    return ReplicationConfig(database="school", concurrency_limit=5, connect_timeout_ms=200)


@pytest.fixture
def client_factory() -> FakeClientFactory:
    return FakeClientFactory()


@pytest.fixture
def registry() -> StaticEndpointRegistry:
    """Endpoints for rdp03-ins-1 .. rdp03-ins-12."""
    return StaticEndpointRegistry(
        {f"rdp03-ins-{i}": url_for(f"rdp03-ins-{i}") for i in range(1, 13)}
    )


@pytest.fixture
def insert_op() -> OperationDescriptor:
    return OperationDescriptor(
        kind=OperationKind.INSERT_ONE,
        collection="students",
        data={"Nombre": "Ana", "Id_Aula": 7},
    )

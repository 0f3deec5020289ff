from __future__ import annotations

import pytest

from replimongo.config import MongoClientConfig, ReplicationConfig
from replimongo.errors import ConfigError


def test_defaults() -> None:
    config = ReplicationConfig()

    assert config.concurrency_limit == 5
    assert config.connect_timeout_ms == 10_000
    assert config.stringify_fields == ("Id_Aula",)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"concurrency_limit": 0},
        {"connect_timeout_ms": 0},
        {"database": ""},
        {"database": "my.db"},
        {"database": "school/replica"},
        {"database": "has space"},
    ],
)
def test_invalid_replication_config(kwargs) -> None:
    with pytest.raises(ConfigError):
        ReplicationConfig(**kwargs)


def test_invalid_pool_sizes() -> None:
    with pytest.raises(ConfigError):
        MongoClientConfig(max_pool_size=1, min_pool_size=2)
    with pytest.raises(ConfigError):
        MongoClientConfig(min_pool_size=-1)


def test_client_kwargs_use_driver_names() -> None:
    kwargs = MongoClientConfig(max_pool_size=7, server_selection_timeout_ms=1234).as_client_kwargs()

    assert kwargs["maxPoolSize"] == 7
    assert kwargs["serverSelectionTimeoutMS"] == 1234
    assert kwargs["heartbeatFrequencyMS"] == 10_000

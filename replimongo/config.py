from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import ConfigError

# Characters MongoDB rejects in database names.
_INVALID_DATABASE_CHARS = frozenset('/\\. "$\x00')


@dataclass(frozen=True)
class MongoClientConfig:
    """
    Driver-level hints handed to every replica client as-is.

    The replication engine never interprets these values; pooling and
    server selection remain the driver's concern.
    """
    max_pool_size: int = 3
    min_pool_size: int = 1
    max_idle_time_ms: int = 30_000
    server_selection_timeout_ms: int = 5_000
    connect_timeout_ms: int = 8_000
    heartbeat_frequency_ms: int = 10_000
    retry_writes: bool = True
    retry_reads: bool = False

    def __post_init__(self) -> None:
        if self.min_pool_size < 0:
            raise ConfigError("min_pool_size must be >= 0")
        if self.max_pool_size < max(1, self.min_pool_size):
            raise ConfigError("max_pool_size must be >= 1 and >= min_pool_size")

    def as_client_kwargs(self) -> dict[str, Any]:
        return {
            "maxPoolSize": self.max_pool_size,
            "minPoolSize": self.min_pool_size,
            "maxIdleTimeMS": self.max_idle_time_ms,
            "serverSelectionTimeoutMS": self.server_selection_timeout_ms,
            "connectTimeoutMS": self.connect_timeout_ms,
            "heartbeatFrequencyMS": self.heartbeat_frequency_ms,
            "retryWrites": self.retry_writes,
            "retryReads": self.retry_reads,
        }


@dataclass(frozen=True)
class ReplicationConfig:
    database: str = "replica"
    concurrency_limit: int = 5
    connect_timeout_ms: int = 10_000
    stringify_fields: tuple[str, ...] = ("Id_Aula",)
    client: MongoClientConfig = field(default_factory=MongoClientConfig)

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if not self.database:
            raise ConfigError("database cannot be empty")
        bad = sorted(_INVALID_DATABASE_CHARS.intersection(self.database))
        if bad:
            raise ConfigError(f"database name {self.database!r} contains invalid characters: {bad}")
        if self.concurrency_limit <= 0:
            raise ConfigError("concurrency_limit must be > 0")
        if self.connect_timeout_ms <= 0:
            raise ConfigError(
                "connect_timeout_ms must be > 0; a zero window would time out every replica"
            )

from .aggregate import AggregateReport, aggregate
from .config import MongoClientConfig, ReplicationConfig
from .errors import ErrorKind, InputError
from .ops import OperationDescriptor, OperationKind, sanitize
from .replica import ReplicationOutcome, StaticEndpointRegistry
from .replicator import ReplicationRun, Replicator
from .scheduler import batches, fan_out

__all__ = [
    "Replicator",
    "ReplicationRun",
    "ReplicationConfig",
    "MongoClientConfig",
    "OperationDescriptor",
    "OperationKind",
    "ReplicationOutcome",
    "StaticEndpointRegistry",
    "AggregateReport",
    "ErrorKind",
    "InputError",
    "aggregate",
    "sanitize",
    "batches",
    "fan_out",
]

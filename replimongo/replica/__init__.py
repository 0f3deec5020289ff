from .connector import ReplicaConnector, replicate_to, with_connection
from .models import ReplicationOutcome
from .registry import EndpointRegistry, StaticEndpointRegistry

__all__ = [
    "ReplicaConnector",
    "ReplicationOutcome",
    "EndpointRegistry",
    "StaticEndpointRegistry",
    "replicate_to",
    "with_connection",
]

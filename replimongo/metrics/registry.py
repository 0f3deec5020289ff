from prometheus_client import Counter, Histogram

REPLICATION_OPERATIONS_TOTAL = Counter(
    "replimongo_replication_operations_total",
    "Operations replicated to a single replica",
    ["collection", "operation", "status"],
)

REPLICATION_FAILURES_TOTAL = Counter(
    "replimongo_replication_failures_total",
    "Per-replica failures by error kind",
    ["error_kind"],
)

REPLICATION_DISPATCH_LATENCY_SECONDS = Histogram(
    "replimongo_replication_dispatch_latency_seconds",
    "Time spent dispatching an operation on a connected replica",
    ["operation"],
)

REPLICA_CONNECT_LATENCY_SECONDS = Histogram(
    "replimongo_replica_connect_latency_seconds",
    "Time to establish a replica connection, or to give up on it",
    ["status"],
)

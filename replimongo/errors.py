from enum import Enum


class ReplimongoError(Exception):
    """Base exception for replimongo errors."""


class InputError(ReplimongoError):
    """Malformed or missing operation payload. Fatal for the whole job."""


class ConfigError(ReplimongoError):
    """Invalid configuration value."""


class ErrorKind(str, Enum):
    """
    Classification of a failure.

    Only INPUT_ERROR aborts a job; every other kind is recorded on the
    outcome of the single replica it happened on.
    """
    INPUT_ERROR = "input_error"
    CONFIGURATION_ERROR = "configuration_error"
    CONNECTION_TIMEOUT = "connection_timeout"
    CONNECTION_ERROR = "connection_error"
    OPERATION_ERROR = "operation_error"
    UNSUPPORTED_OPERATION = "unsupported_operation"


class ReplicaConnectTimeout(ReplimongoError):
    """Replica connection not established within the allotted window."""


class ReplicaConnectError(ReplimongoError):
    """Replica connection attempt failed before the timeout."""

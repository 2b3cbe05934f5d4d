"""
Exception classes for the Docker Service Manager.

Validation errors are raised before any process is spawned. A runtime
command that runs and exits non-zero is not an exception; it is reported
through a ServiceOutcome.
"""


class ServiceManagerError(Exception):
    """Base class for all service manager errors."""


class UnknownService(ServiceManagerError, LookupError):
    """The requested service id is not in the catalog."""

    def __init__(self, service_id: str):
        super().__init__(f"Unknown service: {service_id!r}")
        self.service_id = service_id


class InvalidArgument(ServiceManagerError, ValueError):
    """An image reference, port, volume or environment spec is malformed."""


class ExecutionFault(ServiceManagerError):
    """The runtime executable could not be located or spawned."""

    def __init__(self, message: str, executable: str = None):
        super().__init__(message)
        self.executable = executable


class ExecutionTimeout(ExecutionFault):
    """The runtime command did not finish within the configured timeout."""

    def __init__(self, message: str, executable: str = None, timeout: float = None):
        super().__init__(message, executable=executable)
        self.timeout = timeout

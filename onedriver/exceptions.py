"""Custom exceptions for the OpenNebula machine driver."""


class ManagerError(RuntimeError):
    """Raised on unrecoverable configuration or runtime errors."""


class ConfigurationError(ManagerError):
    """Driver options are missing, conflicting or malformed."""


class RemoteError(ManagerError):
    """The OpenNebula front-end rejected or failed a request."""


class NotFoundError(RemoteError):
    """A name lookup matched nothing."""


class AmbiguousNameError(RemoteError):
    """A name lookup matched more than one resource."""


class UnexpectedStateError(ManagerError):
    """A polled resource reported a state we do not wait through."""


class PollTimeoutError(ManagerError):
    """A polling loop ran out of attempts or time."""


class SSHTimeoutError(PollTimeoutError):
    """The guest never accepted SSH connections."""


class AddressNotSetError(ManagerError):
    """No network address is known for the machine."""

class DomainError(Exception):
    """Base exception for tenancy rule violations."""


class ValidationError(DomainError):
    """Raised when a schema name, tenant code or query is malformed or reserved."""


class NotFoundError(DomainError):
    """Raised when a referenced schema does not exist."""


class ConflictError(DomainError):
    """Raised when a schema exists where its absence was required."""


class TransientProvisioningError(DomainError):
    """A DDL statement hit an "already exists"/"duplicate key" condition.

    Tolerated during provisioning: recorded as a skipped statement, never surfaced
    as an operation failure.
    """

    def __init__(self, statement: str, message: str):
        super().__init__(message)
        self.statement = statement


class PoolTimeoutError(DomainError):
    """Raised when no pooled connection became available in time."""


class FatalPoolError(Exception):
    """The connection pool is unusable; the process must be restarted."""


class RemoteBackendError(Exception):
    """Raised when the remote RPC backend rejects or fails a call."""

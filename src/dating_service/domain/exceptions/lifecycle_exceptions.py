"""
Lifecycle exceptions.

Every error raised while bootstrapping, serving or shutting down the
service is fatal: it is logged once and converted into a process exit code.
"""


class DatingServiceError(Exception):
    """Base exception for fatal lifecycle errors."""

    exit_code: int = 1

    def __init__(self, message: str):
        """
        Initialize DatingServiceError.

        Args:
            message: Human readable error description
        """
        super().__init__(message)
        self.message = message


# ================================================================
# Startup errors (process never reaches serving state)
# ================================================================


class StartupError(DatingServiceError):
    """Raised when the service cannot be initialized."""

    pass


class ConfigurationError(StartupError):
    """Raised when settings cannot be loaded or fail validation."""

    def __init__(self, reason: str):
        """
        Initialize ConfigurationError.

        Args:
            reason: Why configuration could not be loaded
        """
        super().__init__(f"Invalid configuration: {reason}")
        self.reason = reason


class DatabaseConnectionError(StartupError):
    """Raised when the database cannot be opened."""

    def __init__(self, target: str, reason: str):
        """
        Initialize DatabaseConnectionError.

        Args:
            target: Database location (credentials masked)
            reason: Underlying failure description
        """
        super().__init__(f"Failed to connect to database {target}: {reason}")
        self.target = target
        self.reason = reason


# ================================================================
# Serving errors
# ================================================================


class ListenError(DatingServiceError):
    """Raised when the HTTP listener fails or stops on its own."""

    def __init__(self, address: str, reason: str):
        """
        Initialize ListenError.

        Args:
            address: Address the listener was bound to (host:port)
            reason: Underlying failure description
        """
        super().__init__(f"listen {address}: {reason}")
        self.address = address
        self.reason = reason


# ================================================================
# Shutdown errors
# ================================================================


class ShutdownError(DatingServiceError):
    """Base exception for failures during the shutdown sequence."""

    pass


class ServerShutdownError(ShutdownError):
    """Raised when the HTTP server fails to stop gracefully."""

    def __init__(self, reason: str):
        """
        Initialize ServerShutdownError.

        Args:
            reason: Underlying failure description
        """
        super().__init__(f"Server shutdown failed: {reason}")
        self.reason = reason


class DatabaseCloseError(ShutdownError):
    """Raised when the database connection cannot be released."""

    def __init__(self, reason: str):
        """
        Initialize DatabaseCloseError.

        Args:
            reason: Underlying failure description
        """
        super().__init__(f"Failed to close database connection: {reason}")
        self.reason = reason

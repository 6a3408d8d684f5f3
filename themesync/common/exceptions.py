"""
Custom Exception Classes for themesync

Hierarchical exception structure for error handling across services.
Every fetch-path exception carries a FailureKind so diagnostics can
inspect what went wrong without changing control flow.
"""

from enum import Enum


class FailureKind(str, Enum):
    """Kinds of failure recovered locally by the config service"""
    INITIALIZATION_FAILURE = "initialization_failure"
    NETWORK_FAILURE = "network_failure"
    MALFORMED_PAYLOAD = "malformed_payload"
    SCHEMA_VIOLATION = "schema_violation"
    CACHE_WRITE_FAILURE = "cache_write_failure"
    CACHE_READ_FAILURE = "cache_read_failure"


class ThemeSyncError(Exception):
    """Base exception for all themesync errors"""

    kind: FailureKind | None = None

    def __init__(self, message: str, recoverable: bool = True):
        self.message = message
        self.recoverable = recoverable
        super().__init__(message)


class ConfigError(ThemeSyncError):
    """Local settings errors (config file, environment)"""

    def __init__(self, message: str, recoverable: bool = False):
        super().__init__(f"Config Error: {message}", recoverable)


class InitializationError(ThemeSyncError):
    """Remote source could not be configured or seeded"""

    kind = FailureKind.INITIALIZATION_FAILURE

    def __init__(self, message: str):
        super().__init__(f"Initialization Error: {message}", recoverable=True)


class NetworkError(ThemeSyncError):
    """Remote source unreachable, timed out or returned an HTTP error"""

    kind = FailureKind.NETWORK_FAILURE

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(f"Network Error: {message}", recoverable=True)


class MalformedPayloadError(ThemeSyncError):
    """Theme value missing or not a JSON object"""

    kind = FailureKind.MALFORMED_PAYLOAD

    def __init__(self, message: str):
        super().__init__(f"Malformed Payload: {message}", recoverable=True)


class SchemaViolationError(ThemeSyncError):
    """Theme document parsed but does not match the theme schema"""

    kind = FailureKind.SCHEMA_VIOLATION

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(
            f"Schema Violation: {'; '.join(self.errors)}", recoverable=True
        )


class CacheWriteError(ThemeSyncError):
    """Persisting the theme to the local store failed"""

    kind = FailureKind.CACHE_WRITE_FAILURE

    def __init__(self, message: str):
        super().__init__(f"Cache Write Error: {message}", recoverable=True)


class CacheReadError(ThemeSyncError):
    """Stored theme could not be read or parsed"""

    kind = FailureKind.CACHE_READ_FAILURE

    def __init__(self, message: str):
        super().__init__(f"Cache Read Error: {message}", recoverable=True)

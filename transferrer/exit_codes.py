"""
Standard exit codes and error types for transferrer.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
API_ERROR = 65           # External API call failed (GitHub, registry)
CONFIG_ERROR = 66        # Configuration or secret slot error
AUTH_ERROR = 69          # Signing / key material failure
DATA_ERROR = 70          # Data format or validation error
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'ConnectionError': API_ERROR,
    'TimeoutError': API_ERROR,
    'ValueError': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: Exception) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    exit_code = getattr(exc, 'exit_code', None)
    if isinstance(exit_code, int):
        return exit_code
    return EXCEPTION_EXIT_CODES.get(exc.__class__.__name__, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that carries the exit code the process should terminate with.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class APIError(CommandError):
    """Raised when an external API call fails."""
    def __init__(self, message: str):
        super().__init__(message, API_ERROR)


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class MissingConfigError(ConfigError):
    """Raised when a required configuration slot is absent or empty."""
    def __init__(self, key: str):
        super().__init__(f"Missing required configuration: {key}")
        self.key = key


class DecodeError(ConfigError):
    """Raised when a configuration slot is present but fails to decode."""
    def __init__(self, key: str, detail: str):
        super().__init__(f"Invalid value for {key}: {detail}")
        self.key = key
        self.detail = detail


class MetadataAbsentError(CommandError):
    """Raised when a package has tags but the registry holds no metadata for it."""
    def __init__(self, package_name: str):
        super().__init__(
            f"Package {package_name} has tags but no registry metadata; "
            "the registry is in an inconsistent state",
            DATA_ERROR,
        )
        self.package_name = package_name


class MetadataFormatError(CommandError):
    """Raised when a metadata file cannot be read as registry metadata."""
    def __init__(self, message: str):
        super().__init__(message, DATA_ERROR)


class InvalidNameError(CommandError):
    """Raised when a package name does not satisfy the registry naming grammar."""
    def __init__(self, name: str, reason: str):
        super().__init__(f"Invalid package name '{name}': {reason}", DATA_ERROR)
        self.name = name
        self.reason = reason


class SigningError(CommandError):
    """Raised when a payload cannot be signed."""
    def __init__(self, message: str):
        super().__init__(message, AUTH_ERROR)


class SubmissionError(CommandError):
    """Raised when the registry rejects or fails to receive a transfer."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, API_ERROR)
        self.status_code = status_code


class UnsupportedOperationError(CommandError):
    """Raised when a generic git location reaches a GitHub-only step."""
    def __init__(self, message: str):
        super().__init__(message, GENERAL_ERROR)


class PackageValidationError(Exception):
    """
    Package-level validation failure reported by a tag lister.

    Not fatal: the reconciler treats it as "no transfer needed".
    """

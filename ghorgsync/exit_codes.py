"""
Standard exit codes and error types for ghorgsync.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
API_ERROR = 65           # GitHub API call failed
CONFIG_ERROR = 66        # Configuration file error
PERMISSION_ERROR = 67    # Insufficient permissions
NETWORK_ERROR = 68       # Network connection failed
AUTH_ERROR = 69          # Authentication/authorization failed
PARTIAL_SUCCESS = 71     # Some repositories failed or collided
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'ConnectionError': NETWORK_ERROR,
    'TimeoutError': NETWORK_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: BaseException) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class APIError(CommandError):
    """Raised when the GitHub API returns an error or an unreadable response."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, API_ERROR)
        self.status_code = status_code


class AuthError(APIError):
    """Raised on HTTP 401/403 from the GitHub API."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, status_code)
        self.exit_code = AUTH_ERROR


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class DirectoryReadError(CommandError):
    """Raised when the working directory cannot be enumerated."""
    def __init__(self, message: str):
        super().__init__(message, GENERAL_ERROR)


class GitOperationError(CommandError):
    """
    A git command failed.

    ``detail`` holds git's own diagnostic output verbatim.
    """
    operation = "git"

    def __init__(self, detail: str = "", command: Optional[str] = None):
        message = f"{command or self.operation}: {detail}" if detail else (command or self.operation)
        super().__init__(message, GENERAL_ERROR)
        self.detail = detail
        self.command = command


class CloneError(GitOperationError):
    operation = "git clone"


class FetchError(GitOperationError):
    """Fetch failed; also used when branch or status cannot be read."""
    operation = "git fetch"


class CheckoutError(GitOperationError):
    operation = "git checkout"


class PullError(GitOperationError):
    operation = "git pull --ff-only"


class SubmoduleError(GitOperationError):
    operation = "git submodule update"


class RemoteError(GitOperationError):
    operation = "git remote get-url"

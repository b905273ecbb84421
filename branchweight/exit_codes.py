"""
Standard exit codes for branchweight commands.

Following Unix/POSIX conventions for command-line tools.
"""

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
REPO_NOT_FOUND = 64      # Repository path missing or not a git repository
BASELINE_ERROR = 65      # Baseline ref could not be detected or resolved
CONFIG_ERROR = 66        # Configuration file error
GIT_ERROR = 67           # A git command failed in a way that aborts the run
PERMISSION_ERROR = 68    # Insufficient permissions
DATA_ERROR = 70          # Data format or validation error
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'ValueError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'GitError': GIT_ERROR,
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
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class RepositoryNotFoundError(CommandError):
    """Raised when the repository path is missing or is not a git repository."""
    def __init__(self, path: str):
        super().__init__(f"Not a git repository: {path}", REPO_NOT_FOUND)
        self.path = path


class BaselineNotFoundError(CommandError):
    """Raised when no baseline ref resolves and none was given."""
    def __init__(self, message: str = "Could not detect default branch (master/main). Use --branch to specify."):
        super().__init__(message, BASELINE_ERROR)


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)

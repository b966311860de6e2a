"""Errors reported to the user by the command line client."""


class CLIError(Exception):
    """Base class; the message is printed to stderr and the process exits 1."""


class ConfigurationError(CLIError):
    """Local configuration or credential files are unusable."""


class CommandError(CLIError):
    """The command was refused before reaching the server."""


class LoginError(CLIError):
    """The OAuth login or token refresh failed."""


class ApiError(CLIError):
    """The API call failed."""


class RemoteError(ApiError):
    """The server answered with an error message."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class HTTPResponseError(ApiError):
    """The server answered with an error the client cannot interpret."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"{status_code}: {body}")
        self.status_code = status_code
        self.body = body

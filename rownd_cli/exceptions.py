# rownd_cli/exceptions.py
"""
Custom exceptions for the Rownd CLI.

Every error a command can surface derives from RowndCliError. The optional
``hint`` names the command the user should run to fix the problem; the CLI
entrypoint prints it under the message.
"""

from __future__ import annotations

SET_TOKEN_HINT = "rownd config set-token <token>"
SET_REFRESH_TOKEN_HINT = "rownd config set-refresh-token <token>"
SELECT_ACCOUNT_HINT = "rownd account select"
SELECT_APP_HINT = "rownd app select"
OIDC_KEY_HINT = "rownd oidc key-create"
PULL_HINT = "rownd app pull"


class RowndCliError(Exception):
    """Base exception for all CLI errors."""

    exit_code = 1
    default_hint: str | None = None

    def __init__(self, message: str, hint: str | None = None):
        self.message = message
        self.hint = hint if hint is not None else self.default_hint
        super().__init__(message)


# Selection
class NoSelectionError(RowndCliError):
    """Raised when a command needs an account or app that was never chosen."""


class NoAccountSelectedError(NoSelectionError):
    default_hint = SELECT_ACCOUNT_HINT

    def __init__(self, message: str = "No account selected. Please select an account first."):
        super().__init__(message)


class NoAppSelectedError(NoSelectionError):
    default_hint = SELECT_APP_HINT

    def __init__(self, message: str = "No app selected. Please select an app first."):
        super().__init__(message)


# Credentials
class CredentialsError(RowndCliError):
    """Base exception for missing local credentials."""


class NoTokenError(CredentialsError):
    default_hint = SET_TOKEN_HINT

    def __init__(self, message: str = "No token available. Please set your JWT token."):
        super().__init__(message)


class NoRefreshTokenError(CredentialsError):
    default_hint = SET_REFRESH_TOKEN_HINT

    def __init__(self, message: str = "No refresh token available. Please set a refresh token."):
        super().__init__(message)


class MissingAppCredentialsError(CredentialsError):
    """App key/secret pair (or app key alone) could not be found locally."""

    default_hint = OIDC_KEY_HINT


class AuthenticationError(RowndCliError):
    """Raised when a request is still unauthorized after one token refresh."""

    default_hint = SET_TOKEN_HINT


# OAuth plumbing
class OAuthError(RowndCliError):
    """Base exception for OAuth discovery and token exchange failures."""


class DiscoveryError(OAuthError):
    """OAuth server metadata could not be fetched or parsed."""


class RefreshExchangeError(OAuthError):
    """The refresh_token grant was rejected; ``body`` is the raw server reply."""

    default_hint = SET_TOKEN_HINT

    def __init__(self, body: str, status_code: int | None = None):
        self.body = body
        self.status_code = status_code
        super().__init__(f"Token refresh failed: {body}")


class RequestFailedError(RowndCliError):
    """Any non-success API response. The body is kept verbatim for diagnosis."""

    def __init__(self, status_code: int, body: str, action: str | None = None):
        self.status_code = status_code
        self.body = body
        prefix = f"Failed to {action}" if action else "Request failed"
        super().__init__(f"{prefix} ({status_code}): {body}")


# Local files
class ConfigFileError(RowndCliError):
    """Base exception for local configuration file problems."""


class MissingConfigFileError(ConfigFileError):
    def __init__(self, path: str, hint: str | None = None):
        self.path = path
        super().__init__(f"{path} not found", hint=hint)


class MissingTomlError(MissingConfigFileError):
    default_hint = PULL_HINT


class InvalidConfigError(ConfigFileError):
    """The local file parsed but is structurally incomplete, or did not parse."""


# Auxiliary analyzer/image service
class ImageProcessingError(RowndCliError):
    pass


class UploadError(RowndCliError):
    pass


class AnalysisError(RowndCliError):
    pass

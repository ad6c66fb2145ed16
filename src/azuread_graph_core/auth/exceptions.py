"""Custom exceptions for credential selection and authentication.

Example:
    ```python
    from azuread_graph_core.auth.exceptions import AuthError

    if process.returncode != 0:
        raise AuthError("Azure CLI exited with status 1", method="CLI")
    ```
"""


class CredentialError(Exception):
    """Base exception for credential-related errors.

    All credential-specific exceptions inherit from this class,
    making it easy to catch any credential-related error.
    """

    pass


class ConfigError(CredentialError):
    """Raised when credential configuration is incomplete for a method.

    While selecting a method this only causes fallthrough to the next tier.
    It surfaces to callers only when no tier applies and the Azure CLI
    delegate cannot be attempted either.

    Attributes:
        method: The authentication method being evaluated (if any).
        missing: Names of the settings that were missing.

    Example:
        ```python
        try:
            descriptor = resolve_credential(config)
            session = build_session(descriptor, config.cloud)
        except ConfigError as e:
            print(f"Cannot authenticate: {e} (missing: {e.missing})")
        ```
    """

    def __init__(self, message: str, method: str | None = None, missing: tuple[str, ...] = ()):
        """Initialize ConfigError.

        Args:
            message: Error message describing what is incomplete.
            method: Optional authentication method name for reference.
            missing: Names of missing settings.
        """
        super().__init__(message)
        self.method = method
        self.missing = missing


class AuthError(CredentialError):
    """Raised when a credential cannot be constructed or a token cannot be acquired.

    Covers a failing Azure CLI helper (non-zero exit, unparsable output) as
    well as errors raised by the underlying identity library. Fatal: the
    whole query is aborted.

    Attributes:
        method: The authentication method that failed (if known).
    """

    def __init__(self, message: str, method: str | None = None):
        super().__init__(message)
        self.method = method

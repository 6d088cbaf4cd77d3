# src/recipe_auth/errors.py


class RecipeAuthError(Exception):
    """Base class for errors raised by the authentication subsystem."""


class StorageError(RecipeAuthError):
    """Raised when the session storage cannot be read or written."""


class AuthFlowError(RecipeAuthError):
    """A login attempt failed. The message is safe to show to the user."""


class OAuthProtocolError(AuthFlowError):
    """The callback violated the OAuth handshake (missing code/state, state mismatch)."""


class CorruptStorageError(StorageError):
    """The storage document exists but cannot be parsed."""

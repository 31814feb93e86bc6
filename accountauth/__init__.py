"""Account authentication primitives with per-account brute-force lockout."""

from .auth import AccountAuthenticator, AuthError, AuthErrorCode, AuthPolicy, build_authenticator
from .config import Settings, load_settings
from .services import AccountStore, DuplicateKeyError, SqlAccountStore

__all__ = [
    "AccountAuthenticator",
    "AccountStore",
    "AuthError",
    "AuthErrorCode",
    "AuthPolicy",
    "DuplicateKeyError",
    "Settings",
    "SqlAccountStore",
    "build_authenticator",
    "load_settings",
]

from .credentials import Argon2PasswordHasher, IdGenerator, PasswordHasher, TokenIdGenerator
from .policy import AuthPolicy
from .service import AccountAuthenticator, AuthError, AuthErrorCode, build_authenticator

__all__ = [
    "AccountAuthenticator",
    "Argon2PasswordHasher",
    "AuthError",
    "AuthErrorCode",
    "AuthPolicy",
    "IdGenerator",
    "PasswordHasher",
    "TokenIdGenerator",
    "build_authenticator",
]

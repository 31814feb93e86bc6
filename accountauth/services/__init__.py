from .accounts import AccountStore, DuplicateKeyError, SqlAccountStore

__all__ = [
    "AccountStore",
    "DuplicateKeyError",
    "SqlAccountStore",
]

from __future__ import annotations

import secrets
from typing import Protocol

from passlib.hash import argon2


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str:
        ...

    def verify(self, password: str, password_hash: str) -> bool:
        ...


class IdGenerator(Protocol):
    def generate(self) -> str:
        ...


class Argon2PasswordHasher:
    def __init__(self, rounds: int | None = None, memory_cost: int | None = None) -> None:
        options: dict[str, int] = {}
        if rounds is not None:
            options["rounds"] = rounds
        if memory_cost is not None:
            options["memory_cost"] = memory_cost
        self._handler = argon2.using(**options) if options else argon2

    def hash(self, password: str) -> str:
        if not isinstance(password, str) or len(password) == 0:
            raise ValueError("Password must be a non-empty string")
        return self._handler.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        if not password or not password_hash:
            return False
        try:
            return self._handler.verify(password, password_hash)
        except ValueError:
            # Not an argon2 hash at all.
            return False


class TokenIdGenerator:
    def __init__(self, nbytes: int = 12) -> None:
        self.nbytes = nbytes

    def generate(self) -> str:
        return secrets.token_urlsafe(self.nbytes)

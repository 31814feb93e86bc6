from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy.orm import Session

from accountauth.logging import get_logger
from accountauth.models import UserAccount
from accountauth.services import AccountStore, DuplicateKeyError, SqlAccountStore
from accountauth.utils import now_millis

from .credentials import Argon2PasswordHasher, IdGenerator, PasswordHasher, TokenIdGenerator
from .policy import AuthPolicy

if TYPE_CHECKING:
    from accountauth.config import Settings


class AuthErrorCode(Enum):
    EMAIL_IN_USE = "EMAIL_IN_USE"
    NOT_FOUND = "NOT_FOUND"
    WRONG_PASSWORD = "WRONG_PASSWORD"
    NOT_VERIFIED = "NOT_VERIFIED"
    MAX_FAILED_ATTEMPTS_DELAY = "MAX_FAILED_ATTEMPTS_DELAY"
    EXPIRED_RESET_KEY = "EXPIRED_RESET_KEY"


class AuthError(Exception):
    def __init__(self, code: AuthErrorCode) -> None:
        super().__init__(code.value)
        self.code = code


class AccountAuthenticator:
    """Signup, sign-in and credential maintenance over an ``AccountStore``.

    Every operation resolves a single account, runs its guards in order and
    persists the resulting state. Guard failures raise ``AuthError``; storage
    failures propagate untouched. ``now`` (epoch milliseconds) may be passed
    to any operation; it defaults to the wall clock. An empty password
    raises ``ValueError`` before any guard runs or any state is written.
    """

    def __init__(
        self,
        store: AccountStore,
        policy: AuthPolicy | None = None,
        hasher: PasswordHasher | None = None,
        id_generator: IdGenerator | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.policy = policy or AuthPolicy()
        self.hasher = hasher or Argon2PasswordHasher()
        self.id_generator = id_generator or TokenIdGenerator()
        self.logger = logger or get_logger("auth")

    def initialize(self) -> None:
        self.store.initialize()

    def signup(self, email: str, password: str, now: int | None = None) -> str:
        moment = self._moment(now)
        self._ensure_password_given(password)
        self._ensure_email_not_in_use(email)
        account_id = self.id_generator.generate()
        account = UserAccount(
            id=account_id,
            email=email,
            password_hash=self.hasher.hash(password),
            reset_key=self.id_generator.generate(),
            reset_key_expires_at=0,
            failed_attempts=0,
            lockout_started_at=0,
            email_verified_at=0,
            email_changed_at=moment,
            created_at=moment,
            updated_at=moment,
        )
        try:
            self.store.insert(account)
        except DuplicateKeyError as exc:
            raise AuthError(AuthErrorCode.EMAIL_IN_USE) from exc
        self.logger.info("Created account id=%s", account_id)
        return account_id

    def verify_email(self, email: str, now: int | None = None) -> None:
        moment = self._moment(now)
        account = self._find_one(email=email)
        self.store.update_by_id(account.id, {"email_verified_at": moment}, now=moment)

    def signin(
        self,
        email: str,
        password: str,
        require_verified_email: bool | None = None,
        now: int | None = None,
    ) -> UserAccount:
        moment = self._moment(now)
        account = self._find_one(email=email)
        self._ensure_out_of_lockout(account, moment)
        self._ensure_same_password(account, password, moment)
        if self.policy.resolve_require_verified_email(require_verified_email):
            self._ensure_verified_email(account)
        # Re-read so callers see the cleared counters whatever the store.
        return self._find_one(id=account.id)

    def change_email(self, account_id: str, password: str, new_email: str, now: int | None = None) -> None:
        moment = self._moment(now)
        account = self._find_one(id=account_id)
        self._ensure_same_password(account, password, moment)
        self._ensure_email_not_in_use(new_email, owner_id=account.id)
        try:
            self.store.update_by_id(
                account.id,
                {"email": new_email, "email_changed_at": moment},
                now=moment,
            )
        except DuplicateKeyError as exc:
            raise AuthError(AuthErrorCode.EMAIL_IN_USE) from exc
        self.logger.info("Changed email for account id=%s", account.id)

    def change_password(self, account_id: str, password: str, new_password: str, now: int | None = None) -> None:
        moment = self._moment(now)
        self._ensure_password_given(new_password)
        account = self._find_one(id=account_id)
        self._ensure_same_password(account, password, moment)
        self.store.update_by_id(account.id, {"password_hash": self.hasher.hash(new_password)}, now=moment)
        self.logger.info("Changed password for account id=%s", account.id)

    def generate_reset_key(self, email: str, expire_at: int, now: int | None = None) -> str:
        moment = self._moment(now)
        account = self._find_one(email=email)
        reset_key = self.id_generator.generate()
        self.store.update_by_id(
            account.id,
            {"reset_key": reset_key, "reset_key_expires_at": expire_at},
            now=moment,
        )
        self.logger.info("Issued reset key for account id=%s expiring at %s", account.id, expire_at)
        return reset_key

    def reset_password(
        self,
        email: str,
        reset_key: str,
        new_password: str,
        require_verified_email: bool | None = None,
        now: int | None = None,
    ) -> None:
        moment = self._moment(now)
        self._ensure_password_given(new_password)
        account = self._find_one(email=email, reset_key=reset_key)
        self._ensure_out_of_lockout(account, moment)
        self._ensure_valid_reset_key(account, moment)
        if self.policy.resolve_require_verified_email(require_verified_email):
            self._ensure_verified_email(account)
        self.store.update_by_id(
            account.id,
            {
                "password_hash": self.hasher.hash(new_password),
                "failed_attempts": 0,
                "lockout_started_at": 0,
                # Spent: a second redemption reads as expired.
                "reset_key_expires_at": 0,
            },
            now=moment,
        )
        self.logger.info("Reset password for account id=%s", account.id)

    def _moment(self, now: int | None) -> int:
        return now if now is not None else now_millis()

    def _ensure_password_given(self, password: str) -> None:
        if not isinstance(password, str) or len(password) == 0:
            raise ValueError("Password must be a non-empty string")

    def _find_one(self, **filters: Any) -> UserAccount:
        accounts = self.store.find_by_filter(filters)
        if len(accounts) != 1:
            raise AuthError(AuthErrorCode.NOT_FOUND)
        return accounts[0]

    def _ensure_email_not_in_use(self, email: str, owner_id: str | None = None) -> None:
        for existing in self.store.find_by_filter({"email": email}):
            if existing.id != owner_id:
                raise AuthError(AuthErrorCode.EMAIL_IN_USE)

    def _ensure_out_of_lockout(self, account: UserAccount, moment: int) -> None:
        if self.policy.in_lockout_window(account.failed_attempts, account.lockout_started_at, moment):
            self.logger.warning(
                "Rejected attempt for locked account id=%s, %sms remaining",
                account.id,
                self.policy.lockout_remaining_ms(account.lockout_started_at, moment),
            )
            raise AuthError(AuthErrorCode.MAX_FAILED_ATTEMPTS_DELAY)

    def _ensure_same_password(self, account: UserAccount, password: str, moment: int) -> None:
        if not self.hasher.verify(password, account.password_hash):
            self._register_failure(account, moment)
            raise AuthError(AuthErrorCode.WRONG_PASSWORD)
        self._reset_failures(account, moment)

    def _ensure_verified_email(self, account: UserAccount) -> None:
        if not account.has_verified_email():
            raise AuthError(AuthErrorCode.NOT_VERIFIED)

    def _ensure_valid_reset_key(self, account: UserAccount, moment: int) -> None:
        if moment > account.reset_key_expires_at:
            raise AuthError(AuthErrorCode.EXPIRED_RESET_KEY)

    def _register_failure(self, account: UserAccount, moment: int) -> None:
        fields = self.policy.failure_fields(account.failed_attempts, moment)
        self.store.update_by_id(account.id, fields, now=moment)
        if "lockout_started_at" in fields:
            self.logger.warning(
                "Locked account id=%s after %s failed attempts",
                account.id,
                fields["failed_attempts"],
            )
        else:
            self.logger.info(
                "Wrong password for account id=%s (%s/%s)",
                account.id,
                fields["failed_attempts"],
                self.policy.max_failed_attempts,
            )

    def _reset_failures(self, account: UserAccount, moment: int) -> None:
        self.store.update_by_id(account.id, {"failed_attempts": 0, "lockout_started_at": 0}, now=moment)


def build_authenticator(settings: Settings, session: Session) -> AccountAuthenticator:
    return AccountAuthenticator(SqlAccountStore(session), policy=settings.policy())

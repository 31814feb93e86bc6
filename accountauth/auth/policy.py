from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthPolicy:
    """Brute-force and verification policy shared by every operation.

    ``max_failed_attempts`` failures engage a lockout lasting
    ``lockout_duration_ms``. ``require_verified_email`` is the default for the
    verification gate on sign-in and reset; callers may override it per call.
    """

    max_failed_attempts: int = 5
    lockout_duration_ms: int = 30 * 60 * 1000
    require_verified_email: bool = False

    def __post_init__(self) -> None:
        if self.max_failed_attempts < 1:
            raise ValueError("max_failed_attempts must be at least 1")
        if self.lockout_duration_ms < 0:
            raise ValueError("lockout_duration_ms must not be negative")

    def in_lockout_window(self, failed_attempts: int, lockout_started_at: int, now: int) -> bool:
        if failed_attempts < self.max_failed_attempts:
            return False
        return now < lockout_started_at + self.lockout_duration_ms

    def lockout_remaining_ms(self, lockout_started_at: int, now: int) -> int:
        return max(lockout_started_at + self.lockout_duration_ms - now, 0)

    def failure_fields(self, failed_attempts: int, now: int) -> dict[str, int]:
        # The window restarts on any failure at or above the threshold. Failures
        # inside an active window never get here, so this only happens once the
        # previous window has run out.
        attempts = failed_attempts + 1
        fields = {"failed_attempts": attempts}
        if attempts >= self.max_failed_attempts:
            fields["lockout_started_at"] = now
        return fields

    def resolve_require_verified_email(self, override: bool | None) -> bool:
        if override is None:
            return self.require_verified_email
        return override

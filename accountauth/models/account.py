from __future__ import annotations

from sqlalchemy import BigInteger, Column, Integer, String, UniqueConstraint

from .db import Base


class UserAccount(Base):
    __tablename__ = "user_account"
    __table_args__ = (UniqueConstraint("email", name="uq_user_account_email"),)

    id = Column(String(32), primary_key=True)
    email = Column(String(255), nullable=False)
    password_hash = Column(String, nullable=False)
    # Not unique: a redeemed key may linger until the next one is issued.
    reset_key = Column(String(64), nullable=False, index=True)
    reset_key_expires_at = Column(BigInteger, nullable=False, default=0)
    failed_attempts = Column(Integer, nullable=False, default=0)
    lockout_started_at = Column(BigInteger, nullable=False, default=0)
    email_verified_at = Column(BigInteger, nullable=False, default=0)
    email_changed_at = Column(BigInteger, nullable=False, default=0)
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)

    def has_verified_email(self) -> bool:
        return self.email_verified_at >= self.email_changed_at

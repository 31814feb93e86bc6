from __future__ import annotations

import unittest

from sqlalchemy import create_engine, inspect
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from accountauth.models import Base, UserAccount
from accountauth.services import DuplicateKeyError, SqlAccountStore


def _account(account_id: str, email: str, now: int = 1_000) -> UserAccount:
    return UserAccount(
        id=account_id,
        email=email,
        password_hash="hash",
        reset_key=f"key-{account_id}",
        reset_key_expires_at=0,
        failed_attempts=0,
        lockout_started_at=0,
        email_verified_at=0,
        email_changed_at=now,
        created_at=now,
        updated_at=now,
    )


class SqlAccountStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        self.session = Session(self.engine)
        self.store = SqlAccountStore(self.session)

    def tearDown(self) -> None:
        self.session.close()
        self.engine.dispose()

    def test_initialize_creates_table(self) -> None:
        engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
        session = Session(engine)
        try:
            SqlAccountStore(session).initialize()
            self.assertIn("user_account", inspect(engine).get_table_names())
            SqlAccountStore(session).initialize()
        finally:
            session.close()
            engine.dispose()

    def test_find_by_filter_matches_all_fields(self) -> None:
        self.store.insert(_account("a1", "a@example.com"))
        self.store.insert(_account("b1", "b@example.com"))
        found = self.store.find_by_filter({"email": "a@example.com", "reset_key": "key-a1"})
        self.assertEqual([account.id for account in found], ["a1"])
        self.assertEqual(self.store.find_by_filter({"email": "a@example.com", "reset_key": "key-b1"}), [])

    def test_insert_duplicate_email_raises(self) -> None:
        self.store.insert(_account("a1", "a@example.com"))
        with self.assertRaises(DuplicateKeyError):
            self.store.insert(_account("a2", "a@example.com"))
        self.assertEqual(len(self.store.find_by_filter({"email": "a@example.com"})), 1)

    def test_update_by_id_sets_updated_at(self) -> None:
        self.store.insert(_account("a1", "a@example.com"))
        self.store.update_by_id("a1", {"failed_attempts": 2}, now=5_000)
        stored = self.store.find_by_filter({"id": "a1"})[0]
        self.assertEqual(stored.failed_attempts, 2)
        self.assertEqual(stored.updated_at, 5_000)
        self.assertEqual(stored.created_at, 1_000)

    def test_update_by_id_defaults_to_wall_clock(self) -> None:
        self.store.insert(_account("a1", "a@example.com"))
        self.store.update_by_id("a1", {"failed_attempts": 1})
        self.assertGreater(self.store.find_by_filter({"id": "a1"})[0].updated_at, 1_000)

    def test_update_to_taken_email_raises(self) -> None:
        self.store.insert(_account("a1", "a@example.com"))
        self.store.insert(_account("b1", "b@example.com"))
        with self.assertRaises(DuplicateKeyError):
            self.store.update_by_id("b1", {"email": "a@example.com"})
        self.assertEqual(self.store.find_by_filter({"id": "b1"})[0].email, "b@example.com")


class SqlAccountStoreFailureTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
        self.session = Session(self.engine)
        self.store = SqlAccountStore(self.session)

    def tearDown(self) -> None:
        self.session.close()
        self.engine.dispose()

    def test_insert_without_table_propagates_and_rolls_back(self) -> None:
        with self.assertRaises(OperationalError):
            self.store.insert(_account("a1", "a@example.com"))
        self.assertFalse(self.session.in_transaction())
        self.store.initialize()
        self.store.insert(_account("a1", "a@example.com"))
        self.assertEqual(len(self.store.find_by_filter({"id": "a1"})), 1)

    def test_update_without_table_is_not_a_duplicate_key(self) -> None:
        with self.assertRaises(OperationalError) as ctx:
            self.store.update_by_id("a1", {"failed_attempts": 1}, now=5_000)
        self.assertNotIsInstance(ctx.exception, DuplicateKeyError)
        self.assertFalse(self.session.in_transaction())
        self.store.initialize()
        self.store.insert(_account("a1", "a@example.com"))
        self.store.update_by_id("a1", {"failed_attempts": 1}, now=5_000)
        self.assertEqual(self.store.find_by_filter({"id": "a1"})[0].failed_attempts, 1)


if __name__ == "__main__":
    unittest.main()

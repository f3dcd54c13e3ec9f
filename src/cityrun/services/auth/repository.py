"""Credential store access for user records."""

import logging
from typing import Any

from postgrest.exceptions import APIError

from src.cityrun.exceptions import ConflictError
from src.cityrun.services.auth.models import User
from src.cityrun.services.database.utils import SupabaseQueryBuilder, database_call

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


class UserRepository:
    """
    Read and write ``users`` rows in the credential store.

    Lookups are by normalized (trimmed, lower-cased) email; email uniqueness
    is enforced by the store's unique index.
    """

    def __init__(self, db: SupabaseQueryBuilder, table: str = "users"):
        self.db = db
        self.table = table

    def get_by_email(self, email: str) -> User | None:
        with database_call("get_by_email"):
            row = self.db.get_by_field(self.table, "email", email)
        return self._to_user(row)

    def get_by_id(self, user_id: int) -> User | None:
        with database_call("get_by_id"):
            row = self.db.get_by_id(self.table, user_id)
        return self._to_user(row)

    def insert(self, email: str, password_hash: str, display_name: str) -> User:
        """
        Insert a new user.

        Raises:
            ConflictError: If the email is already registered
            StoreUnavailableError: If the store cannot be reached
        """
        data = {"email": email, "password_hash": password_hash, "display_name": display_name}
        try:
            with database_call("insert"):
                row = self.db.insert_record(self.table, data)
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise ConflictError("Email is already registered") from e
            raise

        user = self._to_user(row)
        if user is None:
            raise RuntimeError(f"Insert into {self.table} returned no row")
        return user

    def update_display_name(self, user_id: int, display_name: str) -> User | None:
        with database_call("update_display_name"):
            row = self.db.update_record(self.table, user_id, {"display_name": display_name})
        return self._to_user(row)

    @staticmethod
    def _to_user(row: dict[str, Any] | None) -> User | None:
        return User.model_validate(row) if row else None

"""
User directory backed by a relational table.
Handles user lookups, inserts and deletes, and seeds the admin user at startup.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy import DateTime, Integer, String, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Mapped, mapped_column

from portal.models.user import DEFAULT_ROLE, UserRecord, normalize_role
from portal.services.database import Base, create_session_factory, session_scope
from portal.utils.exceptions import BackendUnavailable, Conflict
from portal.utils.logger import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=DEFAULT_ROLE)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    def __repr__(self):
        return f"<UserRow {self.username} ({self.role})>"


def _to_record(row: UserRow) -> UserRecord:
    """Validate a stored row; rows that break the record invariants are a storage fault"""
    try:
        return UserRecord.model_validate(row)
    except ValidationError as e:
        logger.error("Invalid user row in directory", user_id=row.id, error=str(e))
        raise BackendUnavailable("Invalid user record in directory", detail=str(e))


class UserDirectory:
    """Persistent store of user records.

    Every operation runs in its own short-lived database session. Storage
    failures surface as BackendUnavailable; uniqueness violations on
    username or email surface as Conflict.
    """

    def __init__(self, engine: Engine):
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    def init_schema(self) -> None:
        """Create the users table if it does not exist"""
        Base.metadata.create_all(self._engine)
        logger.info("User directory schema ready")

    def _find_one(self, column, value: str) -> Optional[UserRecord]:
        try:
            with session_scope(self._session_factory) as db:
                row = db.execute(select(UserRow).where(column == value)).scalar_one_or_none()
                return _to_record(row) if row else None
        except SQLAlchemyError as e:
            logger.error("Directory lookup failed", field=column.key, error=str(e))
            raise BackendUnavailable("User directory unavailable", detail=str(e))

    def find_by_username(self, username: str) -> Optional[UserRecord]:
        return self._find_one(UserRow.username, username)

    def find_by_email(self, email: str) -> Optional[UserRecord]:
        return self._find_one(UserRow.email, email)

    def insert(
        self,
        username: str,
        password: str,
        email: str,
        role: Optional[str] = DEFAULT_ROLE,
    ) -> UserRecord:
        """Insert a new user and return the stored record"""
        if not username or not email:
            raise ValueError("Username and email must be non-empty")
        row = UserRow(
            username=username,
            password=password,
            email=email,
            role=normalize_role(role),
        )
        try:
            with session_scope(self._session_factory) as db:
                db.add(row)
                db.commit()
                db.refresh(row)
                record = _to_record(row)
        except IntegrityError as e:
            logger.warning("Duplicate user rejected", username=username, email=email)
            raise Conflict("Username or email already exists", detail=str(e.orig))
        except SQLAlchemyError as e:
            logger.error("Directory insert failed", username=username, error=str(e))
            raise BackendUnavailable("User directory unavailable", detail=str(e))
        logger.info("User created", user_id=record.id, username=username, role=record.role)
        return record

    def delete_by_id(self, user_id: int) -> Optional[UserRecord]:
        """Delete a user; return the deleted record, or None if absent"""
        try:
            with session_scope(self._session_factory) as db:
                row = db.get(UserRow, user_id)
                if row is None:
                    logger.info("No user to delete", user_id=user_id)
                    return None
                record = _to_record(row)
                db.delete(row)
                db.commit()
        except SQLAlchemyError as e:
            logger.error("Directory delete failed", user_id=user_id, error=str(e))
            raise BackendUnavailable("User directory unavailable", detail=str(e))
        logger.info("User deleted", user_id=user_id, username=record.username)
        return record

    def list_all(self) -> List[UserRecord]:
        """All users, newest first"""
        try:
            with session_scope(self._session_factory) as db:
                rows = db.execute(
                    select(UserRow).order_by(UserRow.created_at.desc(), UserRow.id.desc())
                ).scalars().all()
                return [_to_record(row) for row in rows]
        except SQLAlchemyError as e:
            logger.error("Directory listing failed", error=str(e))
            raise BackendUnavailable("User directory unavailable", detail=str(e))

    def ensure_seed_admin(self, username: str, password: str, email: str) -> bool:
        """Create the seed admin if no user has that username.

        Returns True when a new admin was inserted.
        """
        if self.find_by_username(username):
            logger.info("Admin user already exists", username=username)
            return False
        self.insert(username, password, email, role="admin")
        logger.info("Admin user created", username=username)
        return True

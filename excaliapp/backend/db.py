"""
Database abstraction for the drawings table and an in-memory test implementation.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Optional, Protocol

from sqlalchemy import Boolean, Column, String, Text, create_engine, delete, select
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from excaliapp.shared.types import FileRecord, next_timestamp


class DbClient(Protocol):
    """Interface for drawings persistence. All reads are owner-scoped except find_file."""

    def list_files(self, user_id: str) -> list[FileRecord]:
        ...

    def get_file(self, file_id: str, user_id: str) -> Optional[FileRecord]:
        ...

    def find_file(self, file_id: str) -> Optional[FileRecord]:
        ...

    def insert_file(self, record: FileRecord) -> FileRecord:
        ...

    def update_file(
        self,
        file_id: str,
        user_id: str,
        *,
        name: str,
        data: str,
        thumbnail: Optional[str],
        is_public: bool,
    ) -> Optional[FileRecord]:
        ...

    def delete_file(self, file_id: str, user_id: str) -> bool:
        ...


class InMemoryDbClient:
    """Simple in-memory database for development and tests."""

    def __init__(self):
        self.files: Dict[str, FileRecord] = {}

    def list_files(self, user_id: str) -> list[FileRecord]:
        return [f for f in self.files.values() if f.user_id == user_id]

    def get_file(self, file_id: str, user_id: str) -> Optional[FileRecord]:
        record = self.files.get(file_id)
        if record and record.user_id == user_id:
            return record
        return None

    def find_file(self, file_id: str) -> Optional[FileRecord]:
        return self.files.get(file_id)

    def insert_file(self, record: FileRecord) -> FileRecord:
        if record.id in self.files:
            raise ValueError(f"Duplicate file id: {record.id}")
        now = next_timestamp()
        stored = replace(record, created_at=now, updated_at=now, in_storage=None)
        self.files[record.id] = stored
        return stored

    def update_file(
        self,
        file_id: str,
        user_id: str,
        *,
        name: str,
        data: str,
        thumbnail: Optional[str],
        is_public: bool,
    ) -> Optional[FileRecord]:
        existing = self.get_file(file_id, user_id)
        if not existing:
            return None
        updated = replace(
            existing,
            name=name,
            data=data,
            thumbnail=thumbnail,
            is_public=is_public,
            updated_at=next_timestamp(existing.updated_at),
        )
        self.files[file_id] = updated
        return updated

    def delete_file(self, file_id: str, user_id: str) -> bool:
        if not self.get_file(file_id, user_id):
            return False
        del self.files[file_id]
        return True


class SqlDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for SqlDbClient")
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def _to_record(self, row: "DrawingRow") -> FileRecord:
        return FileRecord(
            id=row.id,
            user_id=row.user_id,
            name=row.name,
            data=row.data,
            thumbnail=row.thumbnail,
            created_at=row.created_at,
            updated_at=row.updated_at,
            is_public=bool(row.is_public),
        )

    def _owned(self, session: Session, file_id: str, user_id: str) -> Optional["DrawingRow"]:
        stmt = select(DrawingRow).where(
            DrawingRow.id == file_id, DrawingRow.user_id == user_id
        )
        return session.execute(stmt).scalar_one_or_none()

    def list_files(self, user_id: str) -> list[FileRecord]:
        with self.Session() as session:
            stmt = (
                select(DrawingRow)
                .where(DrawingRow.user_id == user_id)
                .order_by(DrawingRow.updated_at.desc())
            )
            return [self._to_record(row) for row in session.execute(stmt).scalars()]

    def get_file(self, file_id: str, user_id: str) -> Optional[FileRecord]:
        with self.Session() as session:
            row = self._owned(session, file_id, user_id)
            return self._to_record(row) if row else None

    def find_file(self, file_id: str) -> Optional[FileRecord]:
        with self.Session() as session:
            row = session.get(DrawingRow, file_id)
            return self._to_record(row) if row else None

    def insert_file(self, record: FileRecord) -> FileRecord:
        now = next_timestamp()
        with self.Session() as session:
            row = DrawingRow(
                id=record.id,
                user_id=record.user_id,
                name=record.name,
                data=record.data,
                thumbnail=record.thumbnail,
                is_public=record.is_public,
                created_at=now,
                updated_at=now,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_record(row)

    def update_file(
        self,
        file_id: str,
        user_id: str,
        *,
        name: str,
        data: str,
        thumbnail: Optional[str],
        is_public: bool,
    ) -> Optional[FileRecord]:
        with self.Session() as session:
            row = self._owned(session, file_id, user_id)
            if not row:
                return None
            row.name = name
            row.data = data
            row.thumbnail = thumbnail
            row.is_public = is_public
            row.updated_at = next_timestamp(row.updated_at)
            session.commit()
            session.refresh(row)
            return self._to_record(row)

    def delete_file(self, file_id: str, user_id: str) -> bool:
        with self.Session() as session:
            result = session.execute(
                delete(DrawingRow).where(
                    DrawingRow.id == file_id, DrawingRow.user_id == user_id
                )
            )
            session.commit()
            return (result.rowcount or 0) > 0


Base = declarative_base()


class DrawingRow(Base):
    __tablename__ = "excaliapp"

    id = Column(String, primary_key=True)
    user_id = Column("userId", String, nullable=False, index=True)
    name = Column(String, nullable=False, default="Untitled")
    data = Column(Text, nullable=False)
    thumbnail = Column(Text, nullable=True)
    is_public = Column("isPublic", Boolean, nullable=False, default=False)
    created_at = Column("createdAt", String, nullable=False)
    updated_at = Column("updatedAt", String, nullable=False)

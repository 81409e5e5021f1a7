"""Database tables for tracker entities.

Uses SQLAlchemy 2.0 with async support.
Backend-agnostic: works with SQLite (dev) and PostgreSQL.

Three independent tables. ``projects.client_id`` is a plain column, not a
foreign key: dangling client references are allowed.
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

ID_LENGTH = 24


class Base(DeclarativeBase):
    """Base class for all tables."""

    # document key -> column attribute, where they differ
    doc_fields = {}

    def to_doc(self) -> dict:
        doc = {}
        for column in self.__table__.columns:
            doc[self._doc_key(column.key)] = getattr(self, column.key)
        return doc

    @classmethod
    def from_doc(cls, doc: dict) -> "Base":
        row = cls()
        row.apply(doc)
        return row

    def apply(self, changes: dict) -> None:
        columns = set(self.__table__.columns.keys())
        for key, value in changes.items():
            attr = self.doc_fields.get(key, key)
            if attr in columns:
                setattr(self, attr, value)

    @classmethod
    def _doc_key(cls, attr: str) -> str:
        for key, mapped in cls.doc_fields.items():
            if mapped == attr:
                return key
        return attr


class ClientRow(Base):
    __tablename__ = "clients"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<Client(id='{self.id}', name='{self.name}')>"


class ProjectRow(Base):
    __tablename__ = "projects"

    doc_fields = {"clientId": "client_id"}

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    client_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)

    def __repr__(self) -> str:
        return (
            f"<Project(id='{self.id}', status='{self.status}', "
            f"client='{self.client_id}')>"
        )


class TaskRow(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<Task(id='{self.id}', title='{self.title[:40]}')>"


TABLES: dict[str, type[Base]] = {
    "clients": ClientRow,
    "projects": ProjectRow,
    "tasks": TaskRow,
}

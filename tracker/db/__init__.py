"""SQL backend for the tracker document store."""

from .models import Base, ClientRow, ProjectRow, TaskRow
from .store import SQLStore

__all__ = ["Base", "ClientRow", "ProjectRow", "TaskRow", "SQLStore"]

"""Entity API layer: read/write operations over clients, projects and tasks.

Every operation validates its arguments first and then forwards to a
single store call. Nothing is cached between calls; deleting a client does
not touch the projects that reference it.
"""

from typing import Optional, TypeVar

import pydantic

from .errors import ValidationError
from .models import (
    AddClientArgs,
    AddProjectArgs,
    AddTaskArgs,
    Arguments,
    Client,
    IdArgs,
    Project,
    ProjectStatus,
    Record,
    Task,
    UpdateProjectArgs,
)
from .storage import DocumentStore

A = TypeVar("A", bound=Arguments)
R = TypeVar("R", bound=Record)


def validate_args(model: type[A], values: dict) -> A:
    """Build an argument model, turning pydantic errors into ValidationError."""
    try:
        return model.model_validate(values)
    except pydantic.ValidationError as e:
        details = [
            (".".join(str(p) for p in err["loc"]) or "<args>", err["msg"])
            for err in e.errors()
        ]
        summary = "; ".join(f"{field}: {msg}" for field, msg in details)
        raise ValidationError(f"Invalid arguments: {summary}", details) from e


def _record(model: type[R], doc: Optional[dict]) -> Optional[R]:
    return model.model_validate(doc) if doc is not None else None


class TrackerAPI:
    """Typed read/write contract over the tracker collections."""

    def __init__(self, store: DocumentStore):
        self.store = store

    # --- Clients ---

    async def list_clients(self) -> list[Client]:
        return [Client.model_validate(d) for d in await self.store.find("clients")]

    async def get_client(self, id: str) -> Optional[Client]:
        args = validate_args(IdArgs, {"id": id})
        return _record(Client, await self.store.find_by_id("clients", args.id))

    async def create_client(self, name: str, email: str, phone: str) -> Client:
        args = validate_args(AddClientArgs, {"name": name, "email": email, "phone": phone})
        doc = await self.store.save("clients", args.model_dump())
        return Client.model_validate(doc)

    async def delete_client(self, id: str) -> Optional[Client]:
        args = validate_args(IdArgs, {"id": id})
        return _record(Client, await self.store.find_by_id_and_remove("clients", args.id))

    # --- Projects ---

    async def list_projects(self) -> list[Project]:
        return [Project.model_validate(d) for d in await self.store.find("projects")]

    async def get_project(self, id: str) -> Optional[Project]:
        args = validate_args(IdArgs, {"id": id})
        return _record(Project, await self.store.find_by_id("projects", args.id))

    async def create_project(
        self,
        name: str,
        description: str,
        client_id: str,
        status: Optional[ProjectStatus | str] = None,
    ) -> Project:
        args = validate_args(AddProjectArgs, {
            "name": name,
            "description": description,
            "status": status,
            "clientId": client_id,
        })
        doc = await self.store.save("projects", {
            "name": args.name,
            "description": args.description,
            "status": args.status.value,
            "clientId": args.client_id,
        })
        return Project.model_validate(doc)

    async def delete_project(self, id: str) -> Optional[Project]:
        args = validate_args(IdArgs, {"id": id})
        return _record(Project, await self.store.find_by_id_and_remove("projects", args.id))

    async def update_project(
        self,
        id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[ProjectStatus | str] = None,
    ) -> Optional[Project]:
        """Change only the supplied fields; None means "leave as is"."""
        args = validate_args(UpdateProjectArgs, {
            "id": id,
            "name": name,
            "description": description,
            "status": status,
        })
        doc = await self.store.find_by_id_and_update("projects", args.id, args.changes())
        return _record(Project, doc)

    async def resolve_client(self, project: Project) -> Optional[Client]:
        """Look up the client a project refers to; None if it is gone."""
        return _record(Client, await self.store.find_by_id("clients", project.client_id))

    # --- Tasks ---

    async def list_tasks(self) -> list[Task]:
        return [Task.model_validate(d) for d in await self.store.find("tasks")]

    async def create_task(self, title: str) -> Task:
        args = validate_args(AddTaskArgs, {"title": title})
        doc = await self.store.save("tasks", args.model_dump())
        return Task.model_validate(doc)

    async def delete_task(self, id: str) -> Optional[Task]:
        args = validate_args(IdArgs, {"id": id})
        return _record(Task, await self.store.find_by_id_and_remove("tasks", args.id))

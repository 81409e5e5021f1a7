"""Query/mutation schema for the tracker API.

The schema is a fixed table of operations built once at import time. Each
operation names its argument model, its return type and a resolver that
forwards to ``TrackerAPI``. ``Schema.execute`` validates the request,
runs the resolver and serializes the result in wire form, resolving the
``client`` field of projects only when it is selected.
"""

import asyncio
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Literal, Mapping, Optional, Sequence

from .api import TrackerAPI, validate_args
from .errors import ValidationError
from .models import (
    AddClientArgs,
    AddProjectArgs,
    AddTaskArgs,
    Arguments,
    Client,
    IdArgs,
    NoArgs,
    Project,
    Record,
    STATUS_TOKENS,
    Task,
    UpdateProjectArgs,
)

Resolver = Callable[[TrackerAPI, Any], Awaitable[Any]]
FieldResolver = Callable[[TrackerAPI, Any], Awaitable[Optional[Record]]]


@dataclass(frozen=True)
class ObjectType:
    """An entity type as seen on the wire."""
    name: str
    record: type[Record]
    # Fields computed on demand: name -> (type name, resolver)
    resolved: Mapping[str, tuple[str, FieldResolver]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def scalar_fields(self) -> list[str]:
        return [f.alias or name for name, f in self.record.model_fields.items()]

    @property
    def field_names(self) -> list[str]:
        return self.scalar_fields + list(self.resolved)


@dataclass(frozen=True)
class Operation:
    name: str
    kind: Literal["query", "mutation"]
    args: type[Arguments]
    returns: ObjectType
    many: bool
    resolve: Resolver
    description: str = ""

    @property
    def return_type(self) -> str:
        return f"[{self.returns.name}]" if self.many else self.returns.name


async def _project_client(api: TrackerAPI, project: Project) -> Optional[Client]:
    return await api.resolve_client(project)


CLIENT_TYPE = ObjectType("Client", Client)
TODO_TYPE = ObjectType("Todo", Task)
PROJECT_TYPE = ObjectType(
    "Project",
    Project,
    MappingProxyType({"client": ("Client", _project_client)}),
)
TYPES = {t.name: t for t in (CLIENT_TYPE, PROJECT_TYPE, TODO_TYPE)}


class Schema:
    """Immutable table of query and mutation operations."""

    def __init__(self, operations: Sequence[Operation]):
        self._operations = MappingProxyType({op.name: op for op in operations})

    @property
    def operations(self) -> Mapping[str, Operation]:
        return self._operations

    def get(self, name: str) -> Operation:
        try:
            return self._operations[name]
        except KeyError:
            raise ValidationError(
                f"Unknown operation: {name}", [("operation", "not defined")]
            ) from None

    async def execute(
        self,
        api: TrackerAPI,
        operation: str,
        variables: Optional[dict] = None,
        fields: Optional[Sequence[str]] = None,
    ) -> Any:
        """Run one operation and return its result in wire form."""
        op = self.get(operation)
        selection = self._selection(op.returns, fields)
        args = validate_args(op.args, variables or {})
        result = await op.resolve(api, args)
        if op.many:
            return list(await asyncio.gather(
                *(self._serialize(api, op.returns, r, selection) for r in result)
            ))
        return await self._serialize(api, op.returns, result, selection)

    @staticmethod
    def _selection(type_: ObjectType, fields: Optional[Sequence[str]]) -> list[str]:
        if fields is None:
            return type_.scalar_fields
        unknown = [f for f in fields if f not in type_.field_names]
        if unknown:
            raise ValidationError(
                f"Unknown field(s) on {type_.name}: {', '.join(unknown)}",
                [(f, "not defined") for f in unknown],
            )
        return list(fields)

    async def _serialize(
        self,
        api: TrackerAPI,
        type_: ObjectType,
        record: Optional[Record],
        selection: list[str],
    ) -> Optional[dict]:
        if record is None:
            return None
        wire = record.to_wire()
        out = {}
        for name in selection:
            if name in type_.resolved:
                type_name, resolver = type_.resolved[name]
                related = await resolver(api, record)
                nested = TYPES[type_name]
                out[name] = await self._serialize(api, nested, related, nested.scalar_fields)
            else:
                out[name] = wire[name]
        return out

    def describe(self) -> dict:
        """JSON-friendly description of types, enums and operations."""
        return {
            "types": {
                t.name: {
                    "fields": t.scalar_fields,
                    "resolved": {name: ref for name, (ref, _) in t.resolved.items()},
                }
                for t in TYPES.values()
            },
            "enums": {
                "ProjectStatus": {token: s.value for token, s in STATUS_TOKENS.items()},
            },
            "operations": [
                {
                    "name": op.name,
                    "kind": op.kind,
                    "description": op.description,
                    "args": _describe_args(op.args),
                    "returns": op.return_type,
                }
                for op in self._operations.values()
            ],
        }


def _describe_args(model: type[Arguments]) -> list[dict]:
    args = []
    for name, f in model.model_fields.items():
        entry = {"name": f.alias or name, "required": f.is_required()}
        if not f.is_required() and f.default is not None:
            default = f.default
            entry["default"] = getattr(default, "value", default)
        args.append(entry)
    return args


# --- Resolvers ---


async def _clients(api: TrackerAPI, args: NoArgs):
    return await api.list_clients()


async def _client(api: TrackerAPI, args: IdArgs):
    return await api.get_client(args.id)


async def _projects(api: TrackerAPI, args: NoArgs):
    return await api.list_projects()


async def _project(api: TrackerAPI, args: IdArgs):
    return await api.get_project(args.id)


async def _todos(api: TrackerAPI, args: NoArgs):
    return await api.list_tasks()


async def _add_client(api: TrackerAPI, args: AddClientArgs):
    return await api.create_client(args.name, args.email, args.phone)


async def _delete_client(api: TrackerAPI, args: IdArgs):
    return await api.delete_client(args.id)


async def _add_project(api: TrackerAPI, args: AddProjectArgs):
    return await api.create_project(
        args.name, args.description, args.client_id, status=args.status
    )


async def _delete_project(api: TrackerAPI, args: IdArgs):
    return await api.delete_project(args.id)


async def _update_project(api: TrackerAPI, args: UpdateProjectArgs):
    return await api.update_project(
        args.id, name=args.name, description=args.description, status=args.status
    )


async def _add_todo(api: TrackerAPI, args: AddTaskArgs):
    return await api.create_task(args.title)


async def _delete_todo(api: TrackerAPI, args: IdArgs):
    return await api.delete_task(args.id)


def build_schema() -> Schema:
    return Schema([
        # Queries
        Operation("clients", "query", NoArgs, CLIENT_TYPE, True, _clients,
                  "All clients"),
        Operation("client", "query", IdArgs, CLIENT_TYPE, False, _client,
                  "One client by id, or null"),
        Operation("projects", "query", NoArgs, PROJECT_TYPE, True, _projects,
                  "All projects"),
        Operation("project", "query", IdArgs, PROJECT_TYPE, False, _project,
                  "One project by id, or null"),
        Operation("todos", "query", NoArgs, TODO_TYPE, True, _todos,
                  "All to-do items"),
        # Mutations
        Operation("addClient", "mutation", AddClientArgs, CLIENT_TYPE, False,
                  _add_client, "Create a client"),
        Operation("deleteClient", "mutation", IdArgs, CLIENT_TYPE, False,
                  _delete_client, "Delete a client; projects are kept"),
        Operation("addProject", "mutation", AddProjectArgs, PROJECT_TYPE, False,
                  _add_project, "Create a project for a client"),
        Operation("deleteProject", "mutation", IdArgs, PROJECT_TYPE, False,
                  _delete_project, "Delete a project"),
        Operation("updateProject", "mutation", UpdateProjectArgs, PROJECT_TYPE, False,
                  _update_project, "Change the supplied project fields"),
        Operation("addTodo", "mutation", AddTaskArgs, TODO_TYPE, False,
                  _add_todo, "Create a to-do item"),
        Operation("deleteTodo", "mutation", IdArgs, TODO_TYPE, False,
                  _delete_todo, "Delete a to-do item"),
    ])


schema = build_schema()

"""Tests for the query/mutation schema."""

import pytest

from tracker.errors import ValidationError
from tracker.schema import build_schema, schema


EXPECTED_OPERATIONS = {
    "clients": "query",
    "client": "query",
    "projects": "query",
    "project": "query",
    "todos": "query",
    "addClient": "mutation",
    "deleteClient": "mutation",
    "addProject": "mutation",
    "deleteProject": "mutation",
    "updateProject": "mutation",
    "addTodo": "mutation",
    "deleteTodo": "mutation",
}


class TestSchemaTable:

    def test_operations(self):
        assert {name: op.kind for name, op in schema.operations.items()} == EXPECTED_OPERATIONS

    def test_operations_are_read_only(self):
        with pytest.raises(TypeError):
            schema.operations["dropAll"] = None

    def test_build_is_repeatable(self):
        assert list(build_schema().operations) == list(schema.operations)

    def test_describe_add_project_args(self):
        ops = {op["name"]: op for op in schema.describe()["operations"]}
        args = {a["name"]: a for a in ops["addProject"]["args"]}
        assert args["clientId"]["required"] is True
        assert args["status"] == {"name": "status", "required": False, "default": "Not Started"}
        assert ops["addProject"]["returns"] == "Project"
        assert ops["todos"]["returns"] == "[Todo]"

    def test_describe_update_project_args(self):
        ops = {op["name"]: op for op in schema.describe()["operations"]}
        required = {a["name"] for a in ops["updateProject"]["args"] if a["required"]}
        assert required == {"id"}

    def test_describe_types_and_enum(self):
        described = schema.describe()
        assert described["types"]["Project"]["fields"] == [
            "id", "name", "description", "status", "clientId",
        ]
        assert described["types"]["Project"]["resolved"] == {"client": "Client"}
        assert described["enums"]["ProjectStatus"] == {
            "new": "Not Started", "progress": "In Progress", "completed": "Completed",
        }


class TestExecute:

    @pytest.mark.asyncio
    async def test_add_and_query_client(self, api):
        added = await schema.execute(api, "addClient", {
            "name": "Acme", "email": "a@x.com", "phone": "555",
        })
        assert set(added) == {"id", "name", "email", "phone"}
        fetched = await schema.execute(api, "client", {"id": added["id"]})
        assert fetched == added

    @pytest.mark.asyncio
    async def test_missing_record_is_null(self, api):
        assert await schema.execute(api, "project", {"id": "0" * 24}) is None

    @pytest.mark.asyncio
    async def test_add_project_with_token(self, api, acme):
        project = await schema.execute(api, "addProject", {
            "name": "Site", "description": "build",
            "clientId": acme.id, "status": "progress",
        })
        assert project["status"] == "In Progress"
        assert project["clientId"] == acme.id

    @pytest.mark.asyncio
    async def test_missing_required_argument(self, api, store):
        with pytest.raises(ValidationError) as exc:
            await schema.execute(api, "addClient", {"name": "Acme", "email": "a@x.com"})
        assert ("phone", "Field required") in exc.value.details
        assert await store.find("clients") == []

    @pytest.mark.asyncio
    async def test_unknown_argument(self, api):
        with pytest.raises(ValidationError):
            await schema.execute(api, "todos", {"limit": 5})

    @pytest.mark.asyncio
    async def test_unknown_operation(self, api):
        with pytest.raises(ValidationError, match="Unknown operation"):
            await schema.execute(api, "dropAll")

    @pytest.mark.asyncio
    async def test_field_selection(self, api, site):
        projects = await schema.execute(api, "projects", fields=["name", "status"])
        assert projects == [{"name": "Site", "status": "Not Started"}]

    @pytest.mark.asyncio
    async def test_client_resolved_when_selected(self, api, acme, site):
        project = await schema.execute(api, "project", {"id": site.id}, fields=["id", "client"])
        assert project == {"id": site.id, "client": acme.to_wire()}

    @pytest.mark.asyncio
    async def test_client_not_resolved_by_default(self, api, site):
        project = await schema.execute(api, "project", {"id": site.id})
        assert "client" not in project

    @pytest.mark.asyncio
    async def test_dangling_client_is_null(self, api, acme, site):
        await schema.execute(api, "deleteClient", {"id": acme.id})
        projects = await schema.execute(api, "projects", fields=["name", "client"])
        assert projects == [{"name": "Site", "client": None}]

    @pytest.mark.asyncio
    async def test_unknown_field(self, api):
        with pytest.raises(ValidationError, match="Unknown field"):
            await schema.execute(api, "clients", fields=["name", "address"])

    @pytest.mark.asyncio
    async def test_update_project(self, api, site):
        updated = await schema.execute(api, "updateProject", {"id": site.id, "status": "completed"})
        assert updated["status"] == "Completed"
        assert updated["name"] == "Site"

    @pytest.mark.asyncio
    async def test_todos(self, api):
        todo = await schema.execute(api, "addTodo", {"title": "Call Acme"})
        assert await schema.execute(api, "todos") == [todo]
        assert await schema.execute(api, "deleteTodo", {"id": todo["id"]}) == todo
        assert await schema.execute(api, "todos") == []

"""Entity records and operation arguments for the tracker API.

Records are what the API returns; argument models describe what each
query/mutation accepts. Documents are stored in wire form (camelCase keys,
status as its display label), so a stored document validates straight into
its record model.
"""

import enum
from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator


# --- Enums ---


class ProjectStatus(str, enum.Enum):
    """Project lifecycle states. Any state may move to any other."""
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"

    @classmethod
    def parse(cls, value: Any) -> "ProjectStatus":
        """Map a protocol token, display label or member to a status.

        Tokens: new, progress, completed. Labels: Not Started,
        In Progress, Completed.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            if value in STATUS_TOKENS:
                return STATUS_TOKENS[value]
            for status in cls:
                if value == status.value:
                    return status
        raise ValueError(
            f"Unrecognized project status {value!r}; expected one of "
            f"{', '.join(STATUS_TOKENS)}"
        )


STATUS_TOKENS: dict[str, ProjectStatus] = {
    "new": ProjectStatus.NOT_STARTED,
    "progress": ProjectStatus.IN_PROGRESS,
    "completed": ProjectStatus.COMPLETED,
}


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be empty")
    return value


RequiredText = Annotated[str, Field(min_length=1), AfterValidator(_not_blank)]


# --- Records ---


class Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class Client(Record):
    """A customer that projects are done for."""
    name: str
    email: str
    phone: str


class Project(Record):
    """A piece of work for one client, referenced by id only."""
    name: str
    description: str
    status: ProjectStatus = ProjectStatus.NOT_STARTED
    client_id: str = Field(alias="clientId")


class Task(Record):
    """A to-do item. Exposed on the wire as ``Todo``."""
    title: str


# --- Arguments ---


class Arguments(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class NoArgs(Arguments):
    pass


class IdArgs(Arguments):
    id: RequiredText


class AddClientArgs(Arguments):
    name: RequiredText
    email: RequiredText
    phone: RequiredText


class AddProjectArgs(Arguments):
    name: RequiredText
    description: RequiredText
    status: ProjectStatus = ProjectStatus.NOT_STARTED
    client_id: RequiredText = Field(alias="clientId")

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value: Any) -> ProjectStatus:
        # An explicit null means "not supplied"
        if value is None:
            return ProjectStatus.NOT_STARTED
        return ProjectStatus.parse(value)


class UpdateProjectArgs(Arguments):
    id: RequiredText
    name: Optional[RequiredText] = None
    description: Optional[RequiredText] = None
    status: Optional[ProjectStatus] = None

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value: Any) -> Optional[ProjectStatus]:
        if value is None:
            return None
        return ProjectStatus.parse(value)

    def changes(self) -> dict:
        """Supplied fields only, in stored form."""
        changes = {}
        if self.name is not None:
            changes["name"] = self.name
        if self.description is not None:
            changes["description"] = self.description
        if self.status is not None:
            changes["status"] = self.status.value
        return changes


class AddTaskArgs(Arguments):
    title: RequiredText

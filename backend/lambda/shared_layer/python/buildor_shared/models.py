"""buildor_shared.models — Typed entities and their persisted / API forms.

Every entity renders two shapes:

- ``as_item()`` / ``as_attr()``: the DynamoDB document (raw attribute values),
  keyed by the snake_case field names.
- ``as_json()``: the API response body, using the public camelCase names.

Project and BuildInfo are embedded into ProjectDeployment by value; all
entities are frozen, updates go through ``dataclasses.replace`` or a partial
update of the stored record.
"""

from __future__ import annotations

import uuid as uuid_lib
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from buildor_shared.attributes import AttributeMap, AttributeValue, attr_l, attr_m, attr_n, attr_s
from buildor_shared.phases import UNKNOWN_TOKEN, BuildPhase, BuildPhaseStatus, ProjectDeploymentPhase
from buildor_shared.serialization import _now_z

DEFAULT_PRE_BUILD_COMMANDS = ("npm install",)
DEFAULT_BUILD_COMMANDS = ("npm run build",)
DEFAULT_OUTPUT_FOLDER = "dist"
NEVER_PUBLISHED = "-"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Commands:
    pre_build: List[str]
    build: List[str]

    @classmethod
    def new(cls, pre_build: Optional[List[str]] = None, build: Optional[List[str]] = None) -> "Commands":
        """Build a Commands value; empty or absent lists fall back to the defaults."""
        return cls(
            pre_build=list(pre_build) if pre_build else list(DEFAULT_PRE_BUILD_COMMANDS),
            build=list(build) if build else list(DEFAULT_BUILD_COMMANDS),
        )

    @classmethod
    def defaults(cls) -> "Commands":
        return cls.new()

    def as_item(self) -> AttributeMap:
        return {
            "pre_build": attr_l([attr_s(c) for c in self.pre_build]),
            "build": attr_l([attr_s(c) for c in self.build]),
        }

    def as_attr(self) -> AttributeValue:
        return attr_m(self.as_item())

    def as_json(self) -> Dict[str, Any]:
        return {"preBuild": list(self.pre_build), "build": list(self.build)}


# ---------------------------------------------------------------------------
# Project
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProjectCreatePayload:
    name: str
    repository: str
    commands: Optional[Commands] = None
    output_folder: Optional[str] = None


@dataclass(frozen=True)
class Project:
    uuid: str
    name: str
    repository: str
    commands: Commands
    output_folder: str
    last_published: str
    created_at: str
    updated_at: str

    @classmethod
    def new(cls, payload: ProjectCreatePayload) -> "Project":
        timestamp = _now_z()
        return cls(
            uuid=str(uuid_lib.uuid4()),
            name=payload.name,
            repository=payload.repository,
            commands=payload.commands or Commands.defaults(),
            output_folder=payload.output_folder or DEFAULT_OUTPUT_FOLDER,
            last_published=NEVER_PUBLISHED,
            created_at=timestamp,
            updated_at=timestamp,
        )

    def as_item(self) -> AttributeMap:
        return {
            "uuid": attr_s(self.uuid),
            "name": attr_s(self.name),
            "repository": attr_s(self.repository),
            "commands": self.commands.as_attr(),
            "output_folder": attr_s(self.output_folder),
            "last_published": attr_s(self.last_published),
            "created_at": attr_s(self.created_at),
            "updated_at": attr_s(self.updated_at),
        }

    def as_attr(self) -> AttributeValue:
        return attr_m(self.as_item())

    def as_json(self) -> Dict[str, Any]:
        return {
            "uuid": self.uuid,
            "name": self.name,
            "repository": self.repository,
            "commands": self.commands.as_json(),
            "outputFolder": self.output_folder,
            "lastPublished": self.last_published,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


# ---------------------------------------------------------------------------
# BuildInfo
# ---------------------------------------------------------------------------


def _token(value: Optional[Union[ProjectDeploymentPhase, BuildPhase, BuildPhaseStatus]]) -> str:
    return value.render() if value is not None else UNKNOWN_TOKEN


@dataclass(frozen=True)
class BuildInfo:
    """Normalized snapshot of one CodeBuild execution.

    Absent numbers are persisted as ``0`` and absent classifications as
    ``UNKNOWN``; re-parsing a stored record therefore yields those values
    instead of ``None``.
    """

    uuid: str
    build_number: Optional[int] = None
    start_time: Optional[int] = None
    end_time: Optional[int] = None
    deployment_phase: Optional[ProjectDeploymentPhase] = None
    current_phase: Optional[BuildPhase] = None
    build_status: Optional[BuildPhaseStatus] = None

    def as_item(self) -> AttributeMap:
        return {
            "uuid": attr_s(self.uuid),
            "build_number": attr_n(self.build_number or 0),
            "start_time": attr_n(self.start_time or 0),
            "end_time": attr_n(self.end_time or 0),
            "deployment_phase": attr_s(_token(self.deployment_phase)),
            "current_phase": attr_s(_token(self.current_phase)),
            "build_status": attr_s(_token(self.build_status)),
        }

    def as_attr(self) -> AttributeValue:
        return attr_m(self.as_item())

    def as_json(self) -> Dict[str, Any]:
        return {
            "uuid": self.uuid,
            "build_number": self.build_number,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "deployment_phase": self.deployment_phase.render() if self.deployment_phase else None,
            "current_phase": self.current_phase.render() if self.current_phase else None,
            "build_status": self.build_status.render() if self.build_status else None,
        }


# ---------------------------------------------------------------------------
# ProjectDeployment
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProjectDeploymentCreatePayload:
    project: Project
    build: BuildInfo


@dataclass(frozen=True)
class ProjectDeploymentUpdatePayload:
    project: Optional[Project] = None
    build: Optional[BuildInfo] = None

    def as_item(self) -> AttributeMap:
        """Document form holding only the fields being changed."""
        item: AttributeMap = {}
        if self.project is not None:
            item["project"] = self.project.as_attr()
        if self.build is not None:
            item["build"] = self.build.as_attr()
        return item


@dataclass(frozen=True)
class ProjectDeployment:
    uuid: str
    project: Project
    build: BuildInfo
    created_at: str
    updated_at: str

    @classmethod
    def new(cls, payload: ProjectDeploymentCreatePayload) -> "ProjectDeployment":
        """A deployment's identity is the identity of the build that it triggered."""
        timestamp = _now_z()
        return cls(
            uuid=payload.build.uuid,
            project=payload.project,
            build=payload.build,
            created_at=timestamp,
            updated_at=timestamp,
        )

    def as_item(self) -> AttributeMap:
        return {
            "uuid": attr_s(self.uuid),
            "project": self.project.as_attr(),
            "build": self.build.as_attr(),
            "created_at": attr_s(self.created_at),
            "updated_at": attr_s(self.updated_at),
        }

    def as_attr(self) -> AttributeValue:
        return attr_m(self.as_item())

    def as_json(self) -> Dict[str, Any]:
        return {
            "uuid": self.uuid,
            "project": self.project.as_json(),
            "build": self.build.as_json(),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UserCreatePayload:
    fname: str
    lname: str


@dataclass(frozen=True)
class User:
    uuid: str
    fname: str
    lname: str

    @classmethod
    def new(cls, payload: UserCreatePayload) -> "User":
        return cls(uuid=str(uuid_lib.uuid4()), fname=payload.fname, lname=payload.lname)

    def as_item(self) -> AttributeMap:
        return {
            "uuid": attr_s(self.uuid),
            "fname": attr_s(self.fname),
            "lname": attr_s(self.lname),
        }

    def as_json(self) -> Dict[str, Any]:
        return {"uuid": self.uuid, "fname": self.fname, "lname": self.lname}


def list_response(items: List[Any]) -> Dict[str, Any]:
    """Common list envelope: ``{"items": [...], "count": n}``."""
    return {"items": [i.as_json() for i in items], "count": len(items)}

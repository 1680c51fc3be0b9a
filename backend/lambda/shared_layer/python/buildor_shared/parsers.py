"""buildor_shared.parsers — Strict decoders from DynamoDB documents to entities.

Fields are checked in declaration order and the first absent one is reported
with ``MissingModelPropertyError``; no partial entity is ever returned. Nested
failures are re-labelled with the containing field (``project.commands``).
Numeric fields are the one lenient spot: present but unparseable numbers read
as ``0``.
"""

from __future__ import annotations

from typing import Callable, List, TypeVar

from buildor_shared.attributes import AttributeMap, AttributeValue, as_int_lenient, as_l, as_m, as_s
from buildor_shared.errors import AttributeTypeError, InvalidModelPropertyError, MissingModelPropertyError, ModelPropertyError
from buildor_shared.models import BuildInfo, Commands, Project, ProjectDeployment, User
from buildor_shared.phases import BuildPhase, BuildPhaseStatus, ProjectDeploymentPhase

T = TypeVar("T")


def _required(item: AttributeMap, name: str) -> AttributeValue:
    value = item.get(name)
    if value is None:
        raise MissingModelPropertyError(name)
    return value


def _string(item: AttributeMap, name: str) -> str:
    try:
        return as_s(_required(item, name))
    except AttributeTypeError:
        raise InvalidModelPropertyError(name, "S")


def _number(item: AttributeMap, name: str) -> int:
    return as_int_lenient(_required(item, name))


def _string_list(item: AttributeMap, name: str) -> List[str]:
    try:
        return [as_s(v) for v in as_l(_required(item, name))]
    except AttributeTypeError:
        raise InvalidModelPropertyError(name, "L of S")


def _nested(item: AttributeMap, name: str, parse: Callable[[AttributeMap], T]) -> T:
    try:
        document = as_m(_required(item, name))
    except AttributeTypeError:
        raise InvalidModelPropertyError(name, "M")
    try:
        return parse(document)
    except ModelPropertyError as exc:
        raise exc.nested(name) from exc


def parse_commands(item: AttributeMap) -> Commands:
    pre_build = _string_list(item, "pre_build")
    build = _string_list(item, "build")
    return Commands.new(pre_build, build)


def parse_project(item: AttributeMap) -> Project:
    return Project(
        uuid=_string(item, "uuid"),
        name=_string(item, "name"),
        repository=_string(item, "repository"),
        commands=_nested(item, "commands", parse_commands),
        output_folder=_string(item, "output_folder"),
        last_published=_string(item, "last_published"),
        created_at=_string(item, "created_at"),
        updated_at=_string(item, "updated_at"),
    )


def parse_build_info(item: AttributeMap) -> BuildInfo:
    return BuildInfo(
        uuid=_string(item, "uuid"),
        build_number=_number(item, "build_number"),
        start_time=_number(item, "start_time"),
        end_time=_number(item, "end_time"),
        deployment_phase=ProjectDeploymentPhase.parse(_string(item, "deployment_phase")),
        current_phase=BuildPhase.parse(_string(item, "current_phase")),
        build_status=BuildPhaseStatus.parse(_string(item, "build_status")),
    )


def parse_project_deployment(item: AttributeMap) -> ProjectDeployment:
    return ProjectDeployment(
        uuid=_string(item, "uuid"),
        project=_nested(item, "project", parse_project),
        build=_nested(item, "build", parse_build_info),
        created_at=_string(item, "created_at"),
        updated_at=_string(item, "updated_at"),
    )


def parse_user(item: AttributeMap) -> User:
    return User(
        uuid=_string(item, "uuid"),
        fname=_string(item, "fname"),
        lname=_string(item, "lname"),
    )

"""projects_api/lambda_function.py

API Gateway Lambda for the registered project catalog.

Routes:
    POST /projects   body: {"name", "repository", "commands"?: {"pre_build"?, "build"?}, "output_folder"?}
    GET  /projects

Environment variables:
    TABLE_NAME     projects table
    TABLE_REGION   AWS region
    LOG_LEVEL      default: INFO
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional

from buildor_shared.aws_clients import dynamodb_client
from buildor_shared.config import Settings, configure_logging
from buildor_shared.errors import HandlerError
from buildor_shared.http_utils import (
    GENERIC,
    INTERNAL,
    NOT_FOUND,
    PROJECT_CREATION_FAILED,
    SCHEMA_COMPLIANT,
    RequestValidationError,
    _error,
    _optional_str,
    _optional_str_list,
    _parse_body,
    _path_method,
    _required_str,
    _response,
)
from buildor_shared.models import Commands, ProjectCreatePayload, list_response
from buildor_shared.projects import ProjectsHandler

logger = configure_logging()

_projects: Optional[ProjectsHandler] = None


def _get_projects() -> ProjectsHandler:
    global _projects
    if _projects is None:
        settings = Settings.from_env()
        _projects = ProjectsHandler(dynamodb_client(settings), settings.table_name)
    return _projects


def _create_payload(body: Dict[str, Any]) -> ProjectCreatePayload:
    commands = None
    raw_commands = body.get("commands")
    if raw_commands is not None:
        if not isinstance(raw_commands, dict):
            raise RequestValidationError("Body payload not compliant: `commands` must be an object")
        commands = Commands.new(
            _optional_str_list(raw_commands, "pre_build"),
            _optional_str_list(raw_commands, "build"),
        )
    return ProjectCreatePayload(
        name=_required_str(body, "name"),
        repository=_required_str(body, "repository"),
        commands=commands,
        output_folder=_optional_str(body, "output_folder"),
    )


def _handle_create(body: Dict[str, Any]) -> Dict[str, Any]:
    payload = _create_payload(body)
    try:
        project = _get_projects().create(payload)
    except HandlerError as e:
        logger.error(f"[ERROR] Project creation failed: {e}")
        return _error(400, PROJECT_CREATION_FAILED, "Project creation failed, try again")
    return _response(201, project.as_json())


def _handle_list() -> Dict[str, Any]:
    return _response(200, list_response(_get_projects().list()))


_COLLECTION_PATTERN = re.compile(r"/projects/?$")


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Main Lambda entry point."""
    method, path = _path_method(event)
    logger.info(f"projects_api: {method} {path}")

    if method == "OPTIONS":
        return _response(204, "")

    try:
        if _COLLECTION_PATTERN.search(path):
            if method == "POST":
                return _handle_create(_parse_body(event))
            if method == "GET":
                return _handle_list()
            return _error(405, GENERIC, f"Method not allowed: {method}")
        return _error(404, NOT_FOUND, f"Route not found: {method} {path}")

    except RequestValidationError as e:
        logger.warning(f"[WARNING] {e}")
        return _error(400, SCHEMA_COMPLIANT, str(e))
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return _error(500, INTERNAL, "Something wrong happened, try again later")

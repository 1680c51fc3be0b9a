"""project_deployments_api/lambda_function.py

API Gateway Lambda that triggers project builds and serves deployment records.

Routes:
    POST /project-deployments               body: {"project_uuid": "..."}
    GET  /project-deployments/{deployment}

Flow (POST):
    → Fetch project from the projects table
    → Start CodeBuild build (buildspec override on the building project)
    → Persist ProjectDeployment {project, build} keyed by the build uuid

Environment variables:
    TABLE_NAME                          project deployments table
    TABLE_REGION                        AWS region
    TABLE_NAME_PROJECTS                 projects table
    CODEBUILD_PROJECT_NAME_BUILDING     CodeBuild project that builds SPAs
    CODEBUILD_PROJECT_NAME_DEPLOYMENT   CodeBuild project that deploys SPAs
    LOG_LEVEL                           default: INFO
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from buildor_shared.aws_clients import codebuild_client, dynamodb_client
from buildor_shared.codebuild import CodeBuildHandler
from buildor_shared.config import Settings, configure_logging
from buildor_shared.deployments import ProjectDeploymentsHandler
from buildor_shared.errors import BuildNormalizationError, HandlerError
from buildor_shared.http_utils import (
    BUILD_TRIGGER_FAILED,
    BUILD_UNTRACKED,
    DEPLOYMENT_CREATION_FAILED,
    INTERNAL,
    NOT_FOUND,
    PATH_PARAMETER,
    SCHEMA_COMPLIANT,
    RequestValidationError,
    _error,
    _parse_body,
    _path_method,
    _path_parameter,
    _required_str,
    _response,
)
from buildor_shared.models import ProjectDeploymentCreatePayload
from buildor_shared.projects import ProjectsHandler

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logger = configure_logging()

# ---------------------------------------------------------------------------
# Handlers (built once per container)
# ---------------------------------------------------------------------------


@dataclass
class Handlers:
    projects: ProjectsHandler
    codebuild: CodeBuildHandler
    deployments: ProjectDeploymentsHandler


_handlers: Optional[Handlers] = None


def _get_handlers() -> Handlers:
    global _handlers
    if _handlers is None:
        settings = Settings.from_env(with_projects=True, with_codebuild=True)
        ddb = dynamodb_client(settings)
        _handlers = Handlers(
            projects=ProjectsHandler(ddb, settings.projects_table_name),
            codebuild=CodeBuildHandler(
                codebuild_client(settings),
                settings.building_project_name,
                settings.deployment_project_name,
            ),
            deployments=ProjectDeploymentsHandler(ddb, settings.table_name),
        )
    return _handlers


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


def _handle_create(handlers: Handlers, body: Dict[str, Any]) -> Dict[str, Any]:
    project_uuid = _required_str(body, "project_uuid")

    project = handlers.projects.get(project_uuid)
    if project is None:
        return _error(404, NOT_FOUND, "Project not found")
    logger.info(f"[INFO] Project: {project.uuid} ({project.name})")

    try:
        build = handlers.codebuild.create(project)
    except BuildNormalizationError as e:
        # The build is running but nothing tracks it; a retry would start a duplicate.
        logger.error(
            "[ERROR] Build started but untracked: project=%s build_id=%s: %s",
            project.uuid,
            e.build_id,
            e,
        )
        return _error(502, BUILD_UNTRACKED, f"Build started but could not be tracked (build_id={e.build_id})")
    except HandlerError as e:
        logger.error(f"[ERROR] Build trigger failed for {project.uuid}: {e}")
        return _error(502, BUILD_TRIGGER_FAILED, "Build could not be started, try again")

    try:
        deployment = handlers.deployments.create(ProjectDeploymentCreatePayload(project=project, build=build))
    except HandlerError as e:
        logger.error(f"[ERROR] Failed to create project deployment record for build {build.uuid}: {e}")
        return _error(400, DEPLOYMENT_CREATION_FAILED, "Record creation failed but build has been triggered (probably)")

    logger.info(f"[SUCCESS] Project deployment created: {deployment.uuid}")
    return _response(201, deployment.as_json())


def _handle_get(handlers: Handlers, deployment_uuid: str) -> Dict[str, Any]:
    deployment = handlers.deployments.get(deployment_uuid)
    if deployment is None:
        return _error(404, NOT_FOUND, "Project deployment not found")
    return _response(200, deployment.as_json())


_COLLECTION_PATTERN = re.compile(r"/project-deployments/?$")
_ITEM_PATTERN = re.compile(r"/project-deployments/(?P<deployment>[A-Za-z0-9_-]+)/?$")


# ---------------------------------------------------------------------------
# Lambda handler
# ---------------------------------------------------------------------------


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Main Lambda entry point."""
    method, path = _path_method(event)
    logger.info(f"project_deployments_api: {method} {path}")

    if method == "OPTIONS":
        return _response(204, "")

    try:
        handlers = _get_handlers()

        if method == "POST" and _COLLECTION_PATTERN.search(path):
            return _handle_create(handlers, _parse_body(event))

        if method == "GET":
            deployment_uuid = _path_parameter(event, "deployment")
            if deployment_uuid is None:
                m = _ITEM_PATTERN.search(path)
                if m is None:
                    return _error(400, PATH_PARAMETER, 'Path parameter "deployment" not found')
                deployment_uuid = m.group("deployment")
            return _handle_get(handlers, deployment_uuid)

        return _error(404, NOT_FOUND, f"Route not found: {method} {path}")

    except RequestValidationError as e:
        logger.warning(f"[WARNING] {e}")
        return _error(400, SCHEMA_COMPLIANT, str(e))
    except HandlerError as e:
        logger.error(f"[ERROR] {e}", exc_info=True)
        return _error(500, INTERNAL, "Something wrong happened, try again later")
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return _error(500, INTERNAL, "Something wrong happened, try again later")

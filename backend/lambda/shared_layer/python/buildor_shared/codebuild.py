"""buildor_shared.codebuild — Trigger CodeBuild executions and normalize their results.

A project is built by overriding the buildspec of the pre-provisioned
"building" CodeBuild project. CodeBuild answers with one of three shapes
(a single build, a ``batch_get_builds`` list, or a ``start_build`` response);
each shape is wrapped in its own result type and funnelled through
``_parse_build`` into a ``BuildInfo``.

Buildspec phases:
    install     clone $REPO_URL into $PROJECT_NAME (fixed)
    pre_build   title, cd $PROJECT_NAME, project pre-build commands
    build       title, project build commands, move output folder to dist/
    post_build  completion notice (fixed)
"""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from botocore.exceptions import BotoCoreError, ClientError

from buildor_shared.errors import BuildNormalizationError, HandlerError
from buildor_shared.models import BuildInfo, Project
from buildor_shared.phases import BuildPhase, BuildPhaseStatus, classify_deployment_phase
from buildor_shared.serialization import _epoch_millis, _now_z

logger = logging.getLogger(__name__)

ARTIFACTS_DIRECTORY = "dist"
BUILDSPEC_VERSION = "0.2"


# ---------------------------------------------------------------------------
# Buildspec generation
# ---------------------------------------------------------------------------


def pre_build_commands(project: Project) -> List[str]:
    return [
        "echo Install project dependencies",
        "cd $PROJECT_NAME",
        *project.commands.pre_build,
    ]


def build_commands(project: Project) -> List[str]:
    return [
        "echo Build project",
        *project.commands.build,
        f"mv {project.output_folder} ../{ARTIFACTS_DIRECTORY}",
    ]


def artifacts_name(project: Project, timestamp: Optional[str] = None) -> str:
    return f"{project.name}-{ARTIFACTS_DIRECTORY}-{timestamp or _now_z()}.zip"


def build_spec(project: Project, timestamp: Optional[str] = None) -> Dict[str, Any]:
    """Render the buildspec document for ``project``."""
    return {
        "version": BUILDSPEC_VERSION,
        "env": {
            "variables": {
                "ARTIFACTS_DIRECTORY": ARTIFACTS_DIRECTORY,
            },
        },
        "phases": {
            "install": {
                "commands": [
                    "echo Download project",
                    "node -v",
                    "git clone $REPO_URL $PROJECT_NAME",
                ],
            },
            "pre_build": {"commands": pre_build_commands(project)},
            "build": {"commands": build_commands(project)},
            "post_build": {"commands": ["echo Build has completed and artifacts were moved"]},
        },
        "artifacts": {
            "discard-paths": "no",
            "files": [f"{ARTIFACTS_DIRECTORY}/**/*"],
            "name": artifacts_name(project, timestamp),
        },
    }


def _env_var(name: str, value: str) -> Dict[str, str]:
    return {"name": name, "value": value, "type": "PLAINTEXT"}


# ---------------------------------------------------------------------------
# Result normalization
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SingleBuild:
    build: Dict[str, Any]


@dataclass(frozen=True)
class BuildList:
    builds: Optional[List[Dict[str, Any]]]


@dataclass(frozen=True)
class StartBuildResponse:
    response: Dict[str, Any]


BuildResult = Union[SingleBuild, BuildList, StartBuildResponse]


def _parse_build(build: Dict[str, Any]) -> Optional[BuildInfo]:
    raw_id = build.get("id")
    if not raw_id:
        return None
    uuid = str(raw_id).split(":")[-1]
    if not uuid:
        return None

    return BuildInfo(
        uuid=uuid,
        build_number=build.get("buildNumber"),
        start_time=_epoch_millis(build.get("startTime")),
        end_time=_epoch_millis(build.get("endTime")),
        current_phase=BuildPhase.parse(build.get("currentPhase")),
        build_status=BuildPhaseStatus.parse(build.get("buildStatus")),
    )


def get_build_info(result: BuildResult) -> Optional[BuildInfo]:
    """Normalize any CodeBuild result shape; an empty result yields None."""
    if isinstance(result, SingleBuild):
        return _parse_build(result.build)
    if isinstance(result, BuildList):
        if not result.builds:
            return None
        return _parse_build(result.builds[0])
    if isinstance(result, StartBuildResponse):
        build = result.response.get("build")
        if not build:
            return None
        return _parse_build(build)
    raise TypeError(f"Unsupported build result: {type(result).__name__}")


def _raw_build(result: BuildResult) -> Optional[Dict[str, Any]]:
    if isinstance(result, SingleBuild):
        return result.build
    if isinstance(result, BuildList):
        return result.builds[0] if result.builds else None
    return result.response.get("build")


# ---------------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------------


class CodeBuildHandler:
    def __init__(self, client: Any, building_project_name: str, deployment_project_name: str) -> None:
        self.client = client
        self.building_project_name = building_project_name
        self.deployment_project_name = deployment_project_name

    def _classify(self, info: BuildInfo, result: BuildResult) -> BuildInfo:
        build = _raw_build(result) or {}
        raw_identifier = build.get("projectName")
        if raw_identifier is None and build.get("id"):
            raw_identifier = str(build["id"]).rsplit(":", 1)[0]
        phase = classify_deployment_phase(
            raw_identifier,
            self.building_project_name,
            self.deployment_project_name,
        )
        return dataclasses.replace(info, deployment_phase=phase)

    def create(self, project: Project) -> BuildInfo:
        """Start a build of ``project`` on the building CodeBuild project.

        Raises:
            HandlerError: the build could not be started.
            BuildNormalizationError: the build started but its response could
                not be turned into a BuildInfo.
        """
        spec = build_spec(project)
        logger.info("[INFO] Starting CodeBuild build for project %s (%s)", project.uuid, project.name)
        logger.debug("Buildspec: %s", json.dumps(spec))
        try:
            response = self.client.start_build(
                projectName=self.building_project_name,
                buildspecOverride=json.dumps(spec, indent=4),
                environmentVariablesOverride=[
                    _env_var("PROJECT_NAME", project.name),
                    _env_var("REPO_URL", project.repository),
                ],
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("[ERROR] Failed to start build for project %s: %s", project.uuid, exc)
            raise HandlerError(str(exc)) from exc

        result = StartBuildResponse(response)
        try:
            info = get_build_info(result)
        except (TypeError, ValueError):
            logger.error("[ERROR] Unexpected start_build response shape", exc_info=True)
            info = None
        if info is None:
            build_id = (response.get("build") or {}).get("id")
            logger.error("[ERROR] Build started but response could not be normalized: build_id=%s", build_id)
            raise BuildNormalizationError("Build started but its result could not be normalized", build_id)

        info = self._classify(info, result)
        logger.info("[SUCCESS] CodeBuild started: %s (phase=%s)", info.uuid, info.deployment_phase.render())
        return info

    def get(self, id: str) -> Optional[BuildInfo]:
        build_id = f"{self.building_project_name}:{id}"
        logger.info("[INFO] Fetching CodeBuild build %s", build_id)
        try:
            response = self.client.batch_get_builds(ids=[build_id])
        except (ClientError, BotoCoreError) as exc:
            logger.error("[ERROR] Failed to get build %s: %s", build_id, exc)
            raise HandlerError(str(exc)) from exc

        result = BuildList(response.get("builds"))
        info = get_build_info(result)
        if info is None:
            return None
        return self._classify(info, result)

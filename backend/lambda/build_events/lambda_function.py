"""build_events/lambda_function.py

EventBridge-triggered Lambda that tracks CodeBuild progress on deployment records.

Triggered by EventBridge rules on CodeBuild "Build Phase Change" and
"Build State Change" events for the building / deployment projects.

Flow:
    EventBridge (aws.codebuild)
    → Parse event into BuildInfo (phase, status, timings, deployment phase)
    → Patch the ProjectDeployment record's `build` sub-document

Environment variables:
    TABLE_NAME                          project deployments table
    TABLE_REGION                        AWS region
    CODEBUILD_PROJECT_NAME_BUILDING     CodeBuild project that builds SPAs
    CODEBUILD_PROJECT_NAME_DEPLOYMENT   CodeBuild project that deploys SPAs
    LOG_LEVEL                           default: INFO
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Optional

from buildor_shared.aws_clients import dynamodb_client
from buildor_shared.config import Settings, configure_logging
from buildor_shared.deployments import ProjectDeploymentsHandler
from buildor_shared.errors import RecordNotFoundError
from buildor_shared.models import BuildInfo, ProjectDeploymentUpdatePayload
from buildor_shared.phases import BuildPhase, BuildPhaseStatus, ProjectDeploymentPhase, classify_deployment_phase
from buildor_shared.serialization import _epoch_millis

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logger = configure_logging()

# CodeBuild formats additional-information.build-start-time as "Jan 21, 2022 3:04:05 AM".
_START_TIME_FORMAT = "%b %d, %Y %I:%M:%S %p"

_settings: Optional[Settings] = None
_deployments: Optional[ProjectDeploymentsHandler] = None


def _get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env(with_codebuild=True)
    return _settings


def _get_deployments() -> ProjectDeploymentsHandler:
    global _deployments
    if _deployments is None:
        settings = _get_settings()
        _deployments = ProjectDeploymentsHandler(dynamodb_client(settings), settings.table_name)
    return _deployments


# ---------------------------------------------------------------------------
# Event parsing
# ---------------------------------------------------------------------------


def _parse_start_time(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    return _epoch_millis(dt.datetime.strptime(value, _START_TIME_FORMAT))


def _parse_event_time(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    return _epoch_millis(dt.datetime.fromisoformat(value.replace("Z", "+00:00")))


def _parse_build_number(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_event(event: Dict[str, Any], settings: Settings) -> BuildInfo:
    """Turn a CodeBuild EventBridge event into a BuildInfo.

    Raises:
        ValueError: the event has no build id or carries unparseable timestamps.
    """
    detail = event.get("detail") or {}
    build_id = detail.get("build-id")
    if not build_id:
        raise ValueError("CodeBuild event has no detail.build-id")
    uuid = str(build_id).split(":")[-1]

    info = detail.get("additional-information") or {}
    status = detail.get("completed-phase-status") or detail.get("build-status")
    phase = detail.get("completed-phase") or detail.get("current-phase")

    return BuildInfo(
        uuid=uuid,
        build_number=_parse_build_number(info.get("build-number")),
        start_time=_parse_start_time(info.get("build-start-time")),
        end_time=_parse_event_time(event.get("time")),
        deployment_phase=classify_deployment_phase(
            detail.get("project-name"),
            settings.building_project_name,
            settings.deployment_project_name,
        ),
        current_phase=BuildPhase.parse(phase),
        build_status=BuildPhaseStatus.parse(status),
    )


# ---------------------------------------------------------------------------
# Lambda handler
# ---------------------------------------------------------------------------


def lambda_handler(event: Dict[str, Any], context: Any) -> Optional[Dict[str, Any]]:
    """EventBridge Lambda handler."""
    logger.info(f"build_events: {event.get('detail-type', 'unknown')} from {event.get('source', 'unknown')}")
    settings = _get_settings()

    try:
        build = _parse_event(event, settings)
    except ValueError as e:
        logger.error(f"[ERROR] Failed to parse CodeBuild event: {e}", exc_info=True)
        raise

    if build.deployment_phase == ProjectDeploymentPhase.UNKNOWN:
        logger.info(f"[SKIP] Build {build.uuid} does not belong to a configured CodeBuild project")
        return None

    logger.info(
        "[INFO] Build %s: phase=%s status=%s deployment_phase=%s",
        build.uuid,
        build.current_phase.render(),
        build.build_status.render(),
        build.deployment_phase.render(),
    )
    try:
        _get_deployments().update(build.uuid, ProjectDeploymentUpdatePayload(build=build))
    except RecordNotFoundError:
        logger.info(f"[SKIP] No project deployment recorded for build {build.uuid}")
        return None
    logger.info(f"[SUCCESS] Project deployment {build.uuid} updated")
    return build.as_json()

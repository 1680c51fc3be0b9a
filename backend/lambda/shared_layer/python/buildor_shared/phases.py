"""buildor_shared.phases — Build phase, phase status and deployment phase tokens.

Parsing is total: anything that is not one of the known tokens (including an
empty or absent value) maps to ``UNKNOWN``, and ``UNKNOWN`` renders as the
literal ``"UNKNOWN"``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

UNKNOWN_TOKEN = "UNKNOWN"


class _Token(str, Enum):
    @classmethod
    def parse(cls, token: Optional[str]):
        try:
            return cls(token)
        except ValueError:
            return cls(UNKNOWN_TOKEN)

    def render(self) -> str:
        return self.value


class BuildPhase(_Token):
    """One step of a single CodeBuild execution."""

    SUBMITTED = "SUBMITTED"
    PROVISIONING = "PROVISIONING"
    DOWNLOAD_SOURCE = "DOWNLOAD_SOURCE"
    INSTALL = "INSTALL"
    PRE_BUILD = "PRE_BUILD"
    BUILD = "BUILD"
    POST_BUILD = "POST_BUILD"
    UPLOAD_ARTIFACTS = "UPLOAD_ARTIFACTS"
    FINALIZING = "FINALIZING"
    UNKNOWN = UNKNOWN_TOKEN


class BuildPhaseStatus(_Token):
    """Outcome of the most recently completed phase."""

    TIMED_OUT = "TIMED_OUT"
    STOPPED = "STOPPED"
    FAILED = "FAILED"
    SUCCEEDED = "SUCCEEDED"
    FAULT = "FAULT"
    CLIENT_ERROR = "CLIENT_ERROR"
    UNKNOWN = UNKNOWN_TOKEN


class ProjectDeploymentPhase(_Token):
    """Which configured CodeBuild project produced an execution."""

    BUILDING = "BUILDING"
    DEPLOYMENT = "DEPLOYMENT"
    UNKNOWN = UNKNOWN_TOKEN


def classify_deployment_phase(
    raw_identifier: Optional[str],
    building_project_name: str,
    deployment_project_name: str,
) -> ProjectDeploymentPhase:
    """Classify a CodeBuild project name into a deployment phase.

    An already-rendered phase token is accepted too, so re-classifying a
    stored record yields the same phase whatever the configured names are.
    """
    if raw_identifier is None:
        return ProjectDeploymentPhase.UNKNOWN
    if raw_identifier in (building_project_name, ProjectDeploymentPhase.BUILDING.render()):
        return ProjectDeploymentPhase.BUILDING
    if raw_identifier in (deployment_project_name, ProjectDeploymentPhase.DEPLOYMENT.render()):
        return ProjectDeploymentPhase.DEPLOYMENT
    return ProjectDeploymentPhase.UNKNOWN

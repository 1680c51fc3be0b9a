"""buildor_shared.config — Environment-driven configuration.

Settings are read once per Lambda container and passed by reference into the
handlers; shared-layer components never read the environment themselves.

Environment variables:
    TABLE_NAME                          required — table owned by the Lambda
    TABLE_REGION                        required — region for DynamoDB / CodeBuild
    TABLE_NAME_PROJECTS                 required when with_projects=True
    CODEBUILD_PROJECT_NAME_BUILDING     required when with_codebuild=True
    CODEBUILD_PROJECT_NAME_DEPLOYMENT   required when with_codebuild=True
    LOG_LEVEL                           default: INFO
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from buildor_shared.errors import MissingRequiredConfigError

logger = logging.getLogger(__name__)

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


def load_env_var(name: str, default: Optional[str] = None) -> str:
    """Return env var ``name``, falling back to ``default``.

    Raises:
        MissingRequiredConfigError: the variable is unset and no default is given.
    """
    value = os.environ.get(name)
    if value is not None:
        return value
    if default is not None:
        logger.info("[INFO] Env var %s not set, using default: %s", name, default)
        return default
    logger.error("[ERROR] Env var %s not set and no default provided", name)
    raise MissingRequiredConfigError(name)


@dataclass(frozen=True)
class Settings:
    table_name: str
    region: str
    projects_table_name: Optional[str] = None
    building_project_name: Optional[str] = None
    deployment_project_name: Optional[str] = None

    @classmethod
    def from_env(cls, *, with_projects: bool = False, with_codebuild: bool = False) -> "Settings":
        table_name = load_env_var("TABLE_NAME")
        region = load_env_var("TABLE_REGION")
        projects_table_name = load_env_var("TABLE_NAME_PROJECTS") if with_projects else None
        building = deployment = None
        if with_codebuild:
            building = load_env_var("CODEBUILD_PROJECT_NAME_BUILDING")
            deployment = load_env_var("CODEBUILD_PROJECT_NAME_DEPLOYMENT")

        settings = cls(
            table_name=table_name,
            region=region,
            projects_table_name=projects_table_name,
            building_project_name=building,
            deployment_project_name=deployment,
        )
        logger.info("[INFO] Loaded settings: %s", settings)
        return settings


def configure_logging() -> logging.Logger:
    """Configure and return the root logger the way every Lambda entry point does."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    return root

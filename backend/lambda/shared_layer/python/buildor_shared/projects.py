"""buildor_shared.projects — Registered project catalog in DynamoDB."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from buildor_shared.errors import HandlerError, ModelPropertyError
from buildor_shared.models import Project, ProjectCreatePayload
from buildor_shared.parsers import parse_project
from buildor_shared.serialization import _serialize

logger = logging.getLogger(__name__)


class ProjectsHandler:
    def __init__(self, client: Any, table_name: str) -> None:
        self.client = client
        self.table_name = table_name

    def create(self, payload: ProjectCreatePayload) -> Project:
        project = Project.new(payload)
        try:
            self.client.put_item(TableName=self.table_name, Item=project.as_item())
        except (ClientError, BotoCoreError) as exc:
            logger.error("[ERROR] Failed to create project %s: %s", payload.name, exc)
            raise HandlerError(str(exc)) from exc
        logger.info("[INFO] Project created: %s (%s)", project.uuid, project.name)
        return project

    def get(self, uuid: str) -> Optional[Project]:
        try:
            resp = self.client.get_item(TableName=self.table_name, Key={"uuid": _serialize(uuid)})
        except (ClientError, BotoCoreError) as exc:
            logger.error("[ERROR] Failed to get project %s: %s", uuid, exc)
            raise HandlerError(str(exc)) from exc

        item = resp.get("Item")
        if not item:
            return None
        try:
            return parse_project(item)
        except ModelPropertyError as exc:
            logger.warning("[WARNING] Project %s is not parseable, treating as not found: %s", uuid, exc)
            return None

    def list(self) -> List[Project]:
        projects: List[Project] = []
        try:
            for page in self.client.get_paginator("scan").paginate(TableName=self.table_name):
                for item in page.get("Items", []):
                    try:
                        projects.append(parse_project(item))
                    except ModelPropertyError as exc:
                        logger.warning("[WARNING] Skipping unparseable project record: %s", exc)
        except (ClientError, BotoCoreError) as exc:
            logger.error("[ERROR] Failed to list projects: %s", exc)
            raise HandlerError(str(exc)) from exc
        return projects

"""buildor_shared.deployments — Project deployment records in DynamoDB.

Reads fail open (an unparseable record is logged and reported as not found),
writes fail closed (any store failure raises ``HandlerError``).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError

from buildor_shared.errors import HandlerError, ModelPropertyError, RecordNotFoundError
from buildor_shared.expressions import compile_update
from buildor_shared.models import ProjectDeployment, ProjectDeploymentCreatePayload, ProjectDeploymentUpdatePayload
from buildor_shared.parsers import parse_project_deployment
from buildor_shared.serialization import _serialize

logger = logging.getLogger(__name__)


class ProjectDeploymentsHandler:
    def __init__(self, client: Any, table_name: str) -> None:
        self.client = client
        self.table_name = table_name

    def _key(self, uuid: str):
        return {"uuid": _serialize(uuid)}

    def create(self, payload: ProjectDeploymentCreatePayload) -> ProjectDeployment:
        deployment = ProjectDeployment.new(payload)
        logger.info("[INFO] Creating project deployment %s (project=%s)", deployment.uuid, payload.project.uuid)
        try:
            self.client.put_item(TableName=self.table_name, Item=deployment.as_item())
        except (ClientError, BotoCoreError) as exc:
            logger.error("[ERROR] Failed to create project deployment %s: %s", deployment.uuid, exc)
            raise HandlerError(str(exc)) from exc
        return deployment

    def get(self, uuid: str) -> Optional[ProjectDeployment]:
        try:
            resp = self.client.get_item(TableName=self.table_name, Key=self._key(uuid))
        except (ClientError, BotoCoreError) as exc:
            logger.error("[ERROR] Failed to get project deployment %s: %s", uuid, exc)
            raise HandlerError(str(exc)) from exc

        item = resp.get("Item")
        if not item:
            return None
        try:
            return parse_project_deployment(item)
        except ModelPropertyError as exc:
            logger.warning("[WARNING] Project deployment %s is not parseable, treating as not found: %s", uuid, exc)
            return None

    def update(self, uuid: str, payload: ProjectDeploymentUpdatePayload) -> None:
        """Patch an existing record; never creates one.

        Raises:
            RecordNotFoundError: no record is stored under ``uuid``.
            HandlerError: any other store failure.
        """
        update = compile_update(payload)
        kwargs = update.as_kwargs()
        kwargs["ExpressionAttributeNames"] = {**update.names, "#uuid": "uuid"}
        logger.debug("Project deployment %s update: %s", uuid, update.expression)
        try:
            self.client.update_item(
                TableName=self.table_name,
                Key=self._key(uuid),
                ConditionExpression="attribute_exists(#uuid)",
                **kwargs,
            )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                logger.warning("[WARNING] Project deployment %s does not exist, not updated", uuid)
                raise RecordNotFoundError(uuid) from exc
            logger.error("[ERROR] Failed to update project deployment %s: %s", uuid, exc)
            raise HandlerError(str(exc)) from exc
        except BotoCoreError as exc:
            logger.error("[ERROR] Failed to update project deployment %s: %s", uuid, exc)
            raise HandlerError(str(exc)) from exc

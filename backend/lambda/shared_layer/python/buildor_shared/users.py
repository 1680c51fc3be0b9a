"""buildor_shared.users — User records in DynamoDB."""

from __future__ import annotations

import logging
from typing import Any, List

from botocore.exceptions import BotoCoreError, ClientError

from buildor_shared.errors import HandlerError, ModelPropertyError
from buildor_shared.models import User, UserCreatePayload
from buildor_shared.parsers import parse_user

logger = logging.getLogger(__name__)


class UsersHandler:
    def __init__(self, client: Any, table_name: str) -> None:
        self.client = client
        self.table_name = table_name

    def create(self, payload: UserCreatePayload) -> User:
        user = User.new(payload)
        try:
            self.client.put_item(TableName=self.table_name, Item=user.as_item())
        except (ClientError, BotoCoreError) as exc:
            logger.error("[ERROR] Failed to create user: %s", exc)
            raise HandlerError(str(exc)) from exc
        logger.info("[INFO] User created: %s", user.uuid)
        return user

    def list(self) -> List[User]:
        users: List[User] = []
        try:
            for page in self.client.get_paginator("scan").paginate(TableName=self.table_name):
                for item in page.get("Items", []):
                    try:
                        users.append(parse_user(item))
                    except ModelPropertyError as exc:
                        logger.warning("[WARNING] Skipping unparseable user record: %s", exc)
        except (ClientError, BotoCoreError) as exc:
            logger.error("[ERROR] Failed to list users: %s", exc)
            raise HandlerError(str(exc)) from exc
        return users

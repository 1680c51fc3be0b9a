"""users_api/lambda_function.py

API Gateway Lambda for users.

Routes:
    POST /users   body: {"fname", "lname"}
    GET  /users

Environment variables:
    TABLE_NAME     users table
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
    SCHEMA_COMPLIANT,
    USER_CREATION_FAILED,
    RequestValidationError,
    _error,
    _parse_body,
    _path_method,
    _required_str,
    _response,
)
from buildor_shared.models import UserCreatePayload, list_response
from buildor_shared.users import UsersHandler

logger = configure_logging()

_users: Optional[UsersHandler] = None


def _get_users() -> UsersHandler:
    global _users
    if _users is None:
        settings = Settings.from_env()
        _users = UsersHandler(dynamodb_client(settings), settings.table_name)
    return _users


def _handle_create(body: Dict[str, Any]) -> Dict[str, Any]:
    payload = UserCreatePayload(fname=_required_str(body, "fname"), lname=_required_str(body, "lname"))
    try:
        user = _get_users().create(payload)
    except HandlerError as e:
        logger.error(f"[ERROR] User creation failed: {e}")
        return _error(400, USER_CREATION_FAILED, "User creation failed, try again")
    return _response(201, user.as_json())


_COLLECTION_PATTERN = re.compile(r"/users/?$")


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Main Lambda entry point."""
    method, path = _path_method(event)
    logger.info(f"users_api: {method} {path}")

    if method == "OPTIONS":
        return _response(204, "")

    try:
        if _COLLECTION_PATTERN.search(path):
            if method == "POST":
                return _handle_create(_parse_body(event))
            if method == "GET":
                return _response(200, list_response(_get_users().list()))
            return _error(405, GENERIC, f"Method not allowed: {method}")
        return _error(404, NOT_FOUND, f"Route not found: {method} {path}")

    except RequestValidationError as e:
        logger.warning(f"[WARNING] {e}")
        return _error(400, SCHEMA_COMPLIANT, str(e))
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return _error(500, INTERNAL, "Something wrong happened, try again later")

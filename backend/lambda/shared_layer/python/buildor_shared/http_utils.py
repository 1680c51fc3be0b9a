"""buildor_shared.http_utils — API Gateway response helpers and request parsing.

Error bodies carry ``{"code", "message", "details"}`` with the API's error
codes (``CME01`` schema errors, ``CME02`` not found, ...).
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Credentials": "false",
    "X-Requested-With": "*",
    "Access-Control-Allow-Headers": (
        "Accept,Content-Type,Authorization,X-Amz-Date,X-Api-Key,"
        "X-Amz-User-Agent,X-Requested-With,X-Amz-Security-Token"
    ),
    "Access-Control-Allow-Methods": "OPTIONS,HEAD,GET,POST,PUT,PATCH,DELETE",
    "Access-Control-Expose-Headers": "Authorization,X-Requested-With",
}

# (code, message) pairs; details are supplied per response.
GENERIC = ("CME00", "Error")
SCHEMA_COMPLIANT = ("CME01", "Schema Compliant Error")
NOT_FOUND = ("CME02", "Not Found Error")
INTERNAL = ("ISE00", "Internal Server Error")
PATH_PARAMETER = ("GRE100", "Request Error")
PROJECT_CREATION_FAILED = ("PJE00", "Create Project Error")
USER_CREATION_FAILED = ("USE00", "Create User Error")
DEPLOYMENT_CREATION_FAILED = ("PDE00", "Create Project Deployment Error")
BUILD_TRIGGER_FAILED = ("PDE01", "Build Trigger Error")
BUILD_UNTRACKED = ("PDE02", "Build Tracking Error")


class RequestValidationError(ValueError):
    """The request body does not match the expected schema."""


def _response(status_code: int, body: Any) -> Dict[str, Any]:
    """Build a standard API Gateway response with CORS headers."""
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
            **CORS_HEADERS,
        },
        "body": json.dumps(body, default=str),
    }


def _error(status_code: int, error: Tuple[str, str], details: str) -> Dict[str, Any]:
    """Build an error response from an (code, message) pair."""
    code, message = error
    return _response(status_code, {"code": code, "message": message, "details": details})


def _parse_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """Parse the JSON object body of an API Gateway event (handles base64).

    Raises:
        RequestValidationError: the body is not a JSON object.
    """
    raw = event.get("body") or "{}"
    if isinstance(raw, dict):
        return raw
    if event.get("isBase64Encoded"):
        raw = base64.b64decode(raw).decode("utf-8")
    try:
        body = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as exc:
        raise RequestValidationError(f"Body payload not compliant: {exc}") from exc
    if not isinstance(body, dict):
        raise RequestValidationError("Body payload not compliant: expected a JSON object")
    return body


def _path_method(event: Dict[str, Any]) -> Tuple[str, str]:
    """Extract HTTP method and path from an API Gateway v1/v2 event."""
    rc = event.get("requestContext") or {}
    http = rc.get("http") or {}
    method = (http.get("method") or event.get("httpMethod") or "GET").upper()
    path = http.get("path") or event.get("rawPath") or event.get("path") or "/"
    return method, path


def _path_parameter(event: Dict[str, Any], key: str) -> Optional[str]:
    params = event.get("pathParameters") or {}
    value = params.get(key)
    return str(value) if value else None


def _required_str(body: Dict[str, Any], key: str) -> str:
    value = body.get(key)
    if not isinstance(value, str) or not value.strip():
        raise RequestValidationError(f"Body payload not compliant: missing field `{key}`")
    return value.strip()


def _optional_str(body: Dict[str, Any], key: str) -> Optional[str]:
    value = body.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise RequestValidationError(f"Body payload not compliant: `{key}` must be a string")
    return value.strip() or None


def _optional_str_list(body: Dict[str, Any], key: str) -> Optional[List[str]]:
    value = body.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise RequestValidationError(f"Body payload not compliant: `{key}` must be a list of strings")
    return list(value)

import importlib.util
import json
import pathlib
import sys
from unittest.mock import MagicMock, patch

sys.path.insert(0, str(pathlib.Path(__file__).parent.parent / "shared_layer" / "python"))

MODULE_PATH = pathlib.Path(__file__).with_name("lambda_function.py")
SPEC = importlib.util.spec_from_file_location("users_api_lambda", MODULE_PATH)
users_lambda = importlib.util.module_from_spec(SPEC)
assert SPEC and SPEC.loader
sys.modules[SPEC.name] = users_lambda
SPEC.loader.exec_module(users_lambda)

from buildor_shared.users import UsersHandler


def _event(method, body=None):
    return {
        "requestContext": {"http": {"method": method, "path": "/users"}},
        "body": json.dumps(body) if body is not None else None,
    }


def test_create_user():
    ddb = MagicMock()
    with patch.object(users_lambda, "_get_users", return_value=UsersHandler(ddb, "users")):
        resp = users_lambda.lambda_handler(_event("POST", {"fname": "Ada", "lname": "Lovelace"}), None)

    assert resp["statusCode"] == 201
    body = json.loads(resp["body"])
    assert body["fname"] == "Ada"
    assert body["lname"] == "Lovelace"
    assert ddb.put_item.call_args.kwargs["TableName"] == "users"


def test_create_user_requires_lname():
    ddb = MagicMock()
    with patch.object(users_lambda, "_get_users", return_value=UsersHandler(ddb, "users")):
        resp = users_lambda.lambda_handler(_event("POST", {"fname": "Ada"}), None)

    assert resp["statusCode"] == 400
    assert "lname" in json.loads(resp["body"])["details"]
    ddb.put_item.assert_not_called()


def test_list_users():
    ddb = MagicMock()
    ddb.get_paginator.return_value.paginate.return_value = [
        {"Items": [{"uuid": {"S": "u1"}, "fname": {"S": "Ada"}, "lname": {"S": "Lovelace"}}]}
    ]
    with patch.object(users_lambda, "_get_users", return_value=UsersHandler(ddb, "users")):
        resp = users_lambda.lambda_handler(_event("GET"), None)

    assert resp["statusCode"] == 200
    assert json.loads(resp["body"]) == {
        "items": [{"uuid": "u1", "fname": "Ada", "lname": "Lovelace"}],
        "count": 1,
    }

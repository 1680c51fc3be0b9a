"""build_events EventBridge handler tests."""

from __future__ import annotations

import importlib.util
import os
import sys
import unittest
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError

sys.path.insert(0, os.path.dirname(__file__))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "shared_layer", "python"))

_SPEC = importlib.util.spec_from_file_location(
    "build_events",
    os.path.join(os.path.dirname(__file__), "lambda_function.py"),
)
build_events = importlib.util.module_from_spec(_SPEC)
sys.modules[_SPEC.name] = build_events
_SPEC.loader.exec_module(build_events)

from buildor_shared.config import Settings
from buildor_shared.deployments import ProjectDeploymentsHandler
from buildor_shared.errors import HandlerError
from buildor_shared.phases import BuildPhase, BuildPhaseStatus, ProjectDeploymentPhase

BUILDING = "App-Building-SPAs"
DEPLOYMENT = "App-Deployment-SPAs"

_SETTINGS = Settings(
    table_name="deployments",
    region="us-west-2",
    building_project_name=BUILDING,
    deployment_project_name=DEPLOYMENT,
)


def _event(project_name: str = BUILDING, **detail_overrides) -> dict:
    detail = {
        "completed-phase": "PRE_BUILD",
        "completed-phase-status": "SUCCEEDED",
        "project-name": project_name,
        "build-id": f"arn:aws:codebuild:us-west-2:123456789012:build/{project_name}:b1",
        "additional-information": {
            "build-number": 7.0,
            "build-start-time": "Jan 21, 2022 3:04:05 AM",
        },
    }
    detail.update(detail_overrides)
    return {
        "detail-type": "CodeBuild Build Phase Change",
        "source": "aws.codebuild",
        "time": "2022-01-21T03:10:00Z",
        "detail": detail,
    }


class ParseEventTests(unittest.TestCase):
    def test_phase_change_event(self) -> None:
        build = build_events._parse_event(_event(), _SETTINGS)

        self.assertEqual(build.uuid, "b1")
        self.assertEqual(build.build_number, 7)
        self.assertEqual(build.start_time, 1642734245000)
        self.assertEqual(build.end_time, 1642734600000)
        self.assertIs(build.current_phase, BuildPhase.PRE_BUILD)
        self.assertIs(build.build_status, BuildPhaseStatus.SUCCEEDED)
        self.assertIs(build.deployment_phase, ProjectDeploymentPhase.BUILDING)

    def test_state_change_event(self) -> None:
        event = _event(DEPLOYMENT, **{"build-status": "FAILED", "current-phase": "BUILD"})
        del event["detail"]["completed-phase"]
        del event["detail"]["completed-phase-status"]

        build = build_events._parse_event(event, _SETTINGS)

        self.assertIs(build.current_phase, BuildPhase.BUILD)
        self.assertIs(build.build_status, BuildPhaseStatus.FAILED)
        self.assertIs(build.deployment_phase, ProjectDeploymentPhase.DEPLOYMENT)

    def test_missing_build_id(self) -> None:
        with self.assertRaises(ValueError):
            build_events._parse_event(_event(**{"build-id": None}), _SETTINGS)


class LambdaHandlerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.ddb = MagicMock()
        for name, value in (
            ("_get_settings", _SETTINGS),
            ("_get_deployments", ProjectDeploymentsHandler(self.ddb, "deployments")),
        ):
            patcher = patch.object(build_events, name, return_value=value)
            patcher.start()
            self.addCleanup(patcher.stop)

    def test_updates_build_on_deployment_record(self) -> None:
        result = build_events.lambda_handler(_event(), None)

        self.assertEqual(result["uuid"], "b1")
        self.assertEqual(result["current_phase"], "PRE_BUILD")
        kwargs = self.ddb.update_item.call_args.kwargs
        self.assertEqual(kwargs["Key"], {"uuid": {"S": "b1"}})
        self.assertEqual(set(kwargs["ExpressionAttributeNames"]), {"#updated_at", "#build", "#uuid"})
        self.assertEqual(kwargs["ConditionExpression"], "attribute_exists(#uuid)")
        build_doc = kwargs["ExpressionAttributeValues"][":build"]["M"]
        self.assertEqual(build_doc["build_status"], {"S": "SUCCEEDED"})
        self.assertEqual(build_doc["build_number"], {"N": "7"})

    def test_skips_unrelated_projects(self) -> None:
        self.assertIsNone(build_events.lambda_handler(_event("Someone-Elses-Project"), None))
        self.ddb.update_item.assert_not_called()

    def test_skips_build_without_deployment_record(self) -> None:
        self.ddb.update_item.side_effect = ClientError(
            {"Error": {"Code": "ConditionalCheckFailedException", "Message": "The conditional request failed"}},
            "UpdateItem",
        )
        self.assertIsNone(build_events.lambda_handler(_event(DEPLOYMENT), None))
        self.ddb.update_item.assert_called_once()
        self.ddb.put_item.assert_not_called()

    def test_store_failure_is_raised(self) -> None:
        self.ddb.update_item.side_effect = ClientError(
            {"Error": {"Code": "ProvisionedThroughputExceededException", "Message": "busy"}}, "UpdateItem"
        )
        with self.assertRaises(HandlerError):
            build_events.lambda_handler(_event(), None)

    def test_unparseable_start_time_is_raised(self) -> None:
        event = _event()
        event["detail"]["additional-information"]["build-start-time"] = "yesterday"
        with self.assertRaises(ValueError):
            build_events.lambda_handler(event, None)
        self.ddb.update_item.assert_not_called()


if __name__ == "__main__":
    unittest.main()

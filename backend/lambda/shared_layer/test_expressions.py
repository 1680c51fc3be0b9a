"""test_expressions.py — Unit tests for partial update compilation."""

from __future__ import annotations

import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "python"))

from buildor_shared.expressions import compile_update
from buildor_shared.models import BuildInfo, Commands, Project, ProjectDeploymentUpdatePayload
from buildor_shared.phases import BuildPhase

TS = "2024-01-01T00:00:00Z"


class _Payload:
    def __init__(self, item):
        self._item = item

    def as_item(self):
        return self._item


class CompileUpdateTests(unittest.TestCase):
    def test_empty_payload_only_stamps_updated_at(self) -> None:
        update = compile_update(ProjectDeploymentUpdatePayload(), TS)
        self.assertEqual(update.expression, "SET #updated_at = :updated_at")
        self.assertEqual(update.names, {"#updated_at": "updated_at"})
        self.assertEqual(update.values, {":updated_at": {"S": TS}})

    def test_build_only_payload(self) -> None:
        build = BuildInfo(uuid="b1", current_phase=BuildPhase.BUILD)
        update = compile_update(ProjectDeploymentUpdatePayload(build=build), TS)

        self.assertEqual(update.expression, "SET #updated_at = :updated_at, #build = :build")
        self.assertEqual(set(update.names), {"#updated_at", "#build"})
        self.assertEqual(update.values[":build"], build.as_attr())
        self.assertNotIn("#project", update.names)

    def test_clause_per_present_field(self) -> None:
        item = {"a": {"S": "1"}, "b": {"N": "2"}, "c": {"L": []}}
        update = compile_update(_Payload(item), TS)

        clauses = update.expression[len("SET "):].split(", ")
        self.assertEqual(len(clauses), 4)
        self.assertEqual(clauses[0], "#updated_at = :updated_at")
        self.assertFalse(update.expression.endswith(","))
        self.assertFalse(update.expression.endswith(", "))

    def test_project_and_build_payload(self) -> None:
        project = Project(
            uuid="p1",
            name="demo",
            repository="repo",
            commands=Commands.defaults(),
            output_folder="dist",
            last_published="-",
            created_at=TS,
            updated_at=TS,
        )
        payload = ProjectDeploymentUpdatePayload(project=project, build=BuildInfo(uuid="b1"))
        update = compile_update(payload, TS)
        self.assertEqual(update.expression, "SET #updated_at = :updated_at, #project = :project, #build = :build")

    def test_payload_updated_at_is_superseded(self) -> None:
        update = compile_update(_Payload({"updated_at": {"S": "old"}}), TS)
        self.assertEqual(update.expression, "SET #updated_at = :updated_at")
        self.assertEqual(update.values[":updated_at"], {"S": TS})

    def test_default_timestamp_is_generated(self) -> None:
        update = compile_update(ProjectDeploymentUpdatePayload())
        self.assertRegex(update.values[":updated_at"]["S"], r"Z$")

    def test_as_kwargs(self) -> None:
        kwargs = compile_update(ProjectDeploymentUpdatePayload(), TS).as_kwargs()
        self.assertEqual(
            set(kwargs),
            {"UpdateExpression", "ExpressionAttributeNames", "ExpressionAttributeValues"},
        )


if __name__ == "__main__":
    unittest.main()

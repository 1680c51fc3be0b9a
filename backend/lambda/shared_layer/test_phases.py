"""test_phases.py — Unit tests for build phase tokens and deployment phase classification."""

from __future__ import annotations

import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "python"))

from buildor_shared.phases import (
    UNKNOWN_TOKEN,
    BuildPhase,
    BuildPhaseStatus,
    ProjectDeploymentPhase,
    classify_deployment_phase,
)

BUILDING = "App-Building-SPAs"
DEPLOYMENT = "App-Deployment-SPAs"


class TokenTests(unittest.TestCase):
    def test_known_tokens_round_trip(self) -> None:
        for enum_cls in (BuildPhase, BuildPhaseStatus, ProjectDeploymentPhase):
            for member in enum_cls:
                with self.subTest(member=member):
                    self.assertIs(enum_cls.parse(member.render()), member)

    def test_unknown_tokens_map_to_unknown(self) -> None:
        for token in ("IN_PROGRESS", "", "pre_build", None):
            with self.subTest(token=token):
                self.assertIs(BuildPhase.parse(token), BuildPhase.UNKNOWN)
                self.assertIs(BuildPhaseStatus.parse(token), BuildPhaseStatus.UNKNOWN)
                self.assertIs(ProjectDeploymentPhase.parse(token), ProjectDeploymentPhase.UNKNOWN)

    def test_unknown_renders_literal(self) -> None:
        self.assertEqual(BuildPhase.UNKNOWN.render(), UNKNOWN_TOKEN)
        self.assertEqual(BuildPhaseStatus.UNKNOWN.render(), "UNKNOWN")

    def test_phase_order(self) -> None:
        self.assertEqual(
            [p.render() for p in BuildPhase][:9],
            [
                "SUBMITTED",
                "PROVISIONING",
                "DOWNLOAD_SOURCE",
                "INSTALL",
                "PRE_BUILD",
                "BUILD",
                "POST_BUILD",
                "UPLOAD_ARTIFACTS",
                "FINALIZING",
            ],
        )


class ClassifyDeploymentPhaseTests(unittest.TestCase):
    def test_configured_project_names(self) -> None:
        self.assertIs(classify_deployment_phase(BUILDING, BUILDING, DEPLOYMENT), ProjectDeploymentPhase.BUILDING)
        self.assertIs(classify_deployment_phase(DEPLOYMENT, BUILDING, DEPLOYMENT), ProjectDeploymentPhase.DEPLOYMENT)

    def test_unrelated_project_is_unknown(self) -> None:
        self.assertIs(classify_deployment_phase("Other", BUILDING, DEPLOYMENT), ProjectDeploymentPhase.UNKNOWN)
        self.assertIs(classify_deployment_phase(None, BUILDING, DEPLOYMENT), ProjectDeploymentPhase.UNKNOWN)

    def test_classification_is_idempotent(self) -> None:
        for raw in (BUILDING, DEPLOYMENT, "Other"):
            with self.subTest(raw=raw):
                once = classify_deployment_phase(raw, BUILDING, DEPLOYMENT)
                twice = classify_deployment_phase(once.render(), "x", "y")
                self.assertIs(twice, once)


if __name__ == "__main__":
    unittest.main()

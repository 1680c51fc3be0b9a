"""buildor_shared.aws_clients — AWS service client factories.

Each factory builds a fresh boto3 client for the region in ``Settings``.
Lambda entry points call these once per container and hand the clients to the
handlers they construct.
"""

from __future__ import annotations

import boto3
from botocore.config import Config

from buildor_shared.config import Settings

_RETRIES = Config(retries={"max_attempts": 3, "mode": "standard"})


def dynamodb_client(settings: Settings):
    """Build a DynamoDB client for ``settings.region``."""
    return boto3.client("dynamodb", region_name=settings.region, config=_RETRIES)


def codebuild_client(settings: Settings):
    """Build a CodeBuild client for ``settings.region``."""
    return boto3.client("codebuild", region_name=settings.region, config=_RETRIES)

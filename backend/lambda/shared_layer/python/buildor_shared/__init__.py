"""buildor_shared — Shared layer for the buildor Lambda functions.

Provides:
    - Build phase / status classification
    - Typed entities, DynamoDB document parsers and update-expression compiler
    - CodeBuild trigger and result normalization
    - DynamoDB-backed stores for projects, users and project deployments
    - Configuration loading, AWS client factories, HTTP response helpers
"""

__version__ = "1.0.0"

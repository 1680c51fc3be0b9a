"""buildor_shared.errors — Exception taxonomy shared by every buildor component.

Classification of build phases never fails and has no error type.
"""

from __future__ import annotations

from typing import Optional


class MissingRequiredConfigError(RuntimeError):
    """A required environment variable is absent and has no default."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Missing required env var: {name}")


class AttributeTypeError(TypeError):
    """A DynamoDB attribute value does not carry the expected type tag."""

    def __init__(self, expected: str, value: object) -> None:
        self.expected = expected
        self.value = value
        super().__init__(f"Expected attribute of type {expected}, got {value!r}")


class ModelPropertyError(ValueError):
    """Base class for documents that fail entity parsing.

    ``name`` is the dotted path of the offending field, relative to the
    document that was handed to the parser.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(self._message())

    def _message(self) -> str:
        return f"Invalid model property: {self.name}"

    def nested(self, parent: str) -> "ModelPropertyError":
        """Return a copy of this error re-labelled under ``parent``."""
        return self._relabel(f"{parent}.{self.name}")

    def _relabel(self, name: str) -> "ModelPropertyError":
        return type(self)(name)


class MissingModelPropertyError(ModelPropertyError):
    def _message(self) -> str:
        return f"Missing model property: {self.name}"


class InvalidModelPropertyError(ModelPropertyError):
    def __init__(self, name: str, expected: str = "") -> None:
        self.expected = expected
        super().__init__(name)

    def _message(self) -> str:
        if self.expected:
            return f"Invalid model property: {self.name} (expected {self.expected})"
        return f"Invalid model property: {self.name}"

    def _relabel(self, name: str) -> "ModelPropertyError":
        return InvalidModelPropertyError(name, self.expected)


class HandlerError(Exception):
    """Wraps any failure from the build service or the document store."""

    def __init__(self, message: str) -> None:
        self.msg = message
        super().__init__(f"Handler error: {message}")


class RecordNotFoundError(HandlerError):
    """A conditional update targeted a record that does not exist."""

    def __init__(self, uuid: str) -> None:
        self.uuid = uuid
        super().__init__(f"Record not found: {uuid}")


class BuildNormalizationError(HandlerError):
    """The build was started but its result could not be normalized.

    The external build is running even though no ``BuildInfo`` exists for it;
    retrying the trigger would start a duplicate build.
    """

    def __init__(self, message: str, build_id: Optional[str] = None) -> None:
        self.build_id = build_id
        super().__init__(message)

"""Error taxonomy shared by the metrics engine, the validator and the providers.

InputError       — malformed review state; caller-fixable, never retried.
ParseError       — model reply is not recoverable as JSON.
SchemaError      — model reply is JSON but violates the feedback schema.
UpstreamError    — transport failure talking to the model provider.

ParseError and SchemaError share ModelOutputError so the repair loop can
catch both with a single except clause.
"""

from __future__ import annotations


class EditLensError(Exception):
    """Base class for every error raised by editlens."""


class InputError(EditLensError, ValueError):
    """A review request or review state is malformed."""


class ModelOutputError(EditLensError):
    """The model reply could not be turned into validated feedback."""


class ParseError(ModelOutputError):
    """None of the JSON recovery strategies produced a usable value."""


class SchemaError(ModelOutputError):
    """The reply parsed, but the feedback it carries is invalid."""

    def __init__(self, message: str, category: str | None = None):
        super().__init__(message)
        self.category = category


class UpstreamError(EditLensError):
    """The provider call failed at the transport level."""

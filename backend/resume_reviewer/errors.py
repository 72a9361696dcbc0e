"""Failure taxonomy shared by the extractor, the AI client and the flow controller.

Each error carries the user-facing message as ``str(exc)`` and a short ``kind``
tag that survives conversion into outcome objects and JSON responses.
"""
from __future__ import annotations


class ReviewError(Exception):
    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ReviewError):
    kind = "validation"


class ExtractionError(ReviewError):
    kind = "extraction"


class CredentialMissing(ReviewError):
    kind = "credential_missing"


class AuthError(ReviewError):
    kind = "auth"


class RateLimited(ReviewError):
    kind = "rate_limited"


class ProviderError(ReviewError):
    kind = "provider"


class ResponseParseError(ReviewError):
    kind = "response_parse"


class ResponseShapeError(ReviewError):
    kind = "response_shape"


class UnexpectedError(ReviewError):
    kind = "unexpected"


# HTTP status used by the JSON API for each failure kind.
STATUS_BY_KIND = {
    ValidationError.kind: 400,
    ExtractionError.kind: 422,
    CredentialMissing.kind: 401,
    AuthError.kind: 401,
    RateLimited.kind: 429,
    ProviderError.kind: 502,
    ResponseParseError.kind: 502,
    ResponseShapeError.kind: 502,
    UnexpectedError.kind: 500,
}

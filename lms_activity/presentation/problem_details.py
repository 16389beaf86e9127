"""RFC 7807 Problem Details responses for the API."""

from typing import Any, Final

from pydantic import BaseModel, Field

from ..constants import VIEWER_HEADER

PROBLEM_BASE_URL: Final = "/problems"


class ErrorCodes:
    """Machine-readable codes used in the `errors` array."""

    VALIDATION_FAILED: Final = "validation_failed"
    FIELD_REQUIRED: Final = "field_required"
    FIELD_TOO_LONG: Final = "field_too_long"
    FIELD_INVALID_FORMAT: Final = "field_invalid_format"
    FIELD_INVALID_VALUE: Final = "field_invalid_value"
    PAYLOAD_MISMATCH: Final = "payload_mismatch"
    RESOURCE_NOT_FOUND: Final = "resource_not_found"
    RESOURCE_ALREADY_EXISTS: Final = "resource_already_exists"
    AUTHENTICATION_REQUIRED: Final = "authentication_required"
    PERMISSION_DENIED: Final = "permission_denied"
    INTERNAL_ERROR: Final = "internal_error"


class ProblemDetail(BaseModel):
    type: str = Field(description="URI reference identifying the problem type")
    title: str = Field(description="Short summary of the problem type")
    status: int = Field(description="HTTP status code")
    detail: str | None = Field(default=None, description="Explanation of this case")
    instance: str | None = Field(default=None, description="Request path")
    errors: list[dict[str, Any]] | None = None


class ValidationProblemDetail(ProblemDetail):
    errors: list[dict[str, Any]] | None = Field(default_factory=list)


class NotFoundProblemDetail(ProblemDetail):
    resource_type: str | None = None
    resource_id: int | None = None


class ConflictProblemDetail(ProblemDetail):
    resource_type: str | None = None
    conflicting_field: str | None = None


def _type(slug: str) -> str:
    return f"{PROBLEM_BASE_URL}/{slug}"


class ProblemDetailFactory:
    @staticmethod
    def validation_failed(
        detail: str,
        instance: str | None = None,
        field_errors: list[dict[str, Any]] | None = None,
    ) -> ValidationProblemDetail:
        return ValidationProblemDetail(
            type=_type("validation-failed"),
            title="Validation Failed",
            status=400,
            detail=detail,
            instance=instance,
            errors=field_errors or [],
        )

    @staticmethod
    def not_found(
        detail: str,
        instance: str | None = None,
        resource_type: str | None = None,
        resource_id: int | None = None,
    ) -> NotFoundProblemDetail:
        return NotFoundProblemDetail(
            type=_type("resource-not-found"),
            title="Resource Not Found",
            status=404,
            detail=detail,
            instance=instance,
            resource_type=resource_type,
            resource_id=resource_id,
            errors=[
                {
                    "field": resource_type or "id",
                    "code": ErrorCodes.RESOURCE_NOT_FOUND,
                    "message": detail,
                }
            ],
        )

    @staticmethod
    def resource_already_exists(
        resource_type: str,
        detail: str,
        instance: str | None = None,
        conflicting_field: str | None = None,
    ) -> ConflictProblemDetail:
        return ConflictProblemDetail(
            type=_type("resource-already-exists"),
            title="Resource Already Exists",
            status=409,
            detail=detail,
            instance=instance,
            resource_type=resource_type,
            conflicting_field=conflicting_field,
        )

    @staticmethod
    def authentication_required(
        detail: str, instance: str | None = None
    ) -> ProblemDetail:
        return ProblemDetail(
            type=_type("authentication-required"),
            title="Authentication Required",
            status=401,
            detail=detail,
            instance=instance,
            errors=[
                {
                    "field": VIEWER_HEADER,
                    "code": ErrorCodes.AUTHENTICATION_REQUIRED,
                    "message": detail,
                }
            ],
        )

    @staticmethod
    def permission_denied(detail: str, instance: str | None = None) -> ProblemDetail:
        return ProblemDetail(
            type=_type("permission-denied"),
            title="Permission Denied",
            status=403,
            detail=detail,
            instance=instance,
            errors=[{"code": ErrorCodes.PERMISSION_DENIED, "message": detail}],
        )

    @staticmethod
    def internal_server_error(
        detail: str, instance: str | None = None
    ) -> ProblemDetail:
        return ProblemDetail(
            type=_type("internal-server-error"),
            title="Internal Server Error",
            status=500,
            detail=detail,
            instance=instance,
            errors=[{"code": ErrorCodes.INTERNAL_ERROR, "message": detail}],
        )

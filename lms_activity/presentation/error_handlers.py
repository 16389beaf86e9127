"""Centralized error handling for the presentation layer."""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..domain.exceptions import (
    AuthenticationError,
    DomainError,
    EntityNotFoundError,
    NotFoundError,
    PayloadMismatchError,
    PermissionDeniedError,
    ValidationError,
)
from .problem_details import ErrorCodes, ProblemDetail, ProblemDetailFactory


def problem_response(problem: ProblemDetail) -> JSONResponse:
    return JSONResponse(
        status_code=problem.status,
        content=problem.model_dump(exclude_none=True),
        media_type="application/problem+json",
    )


def handle_domain_error(error: DomainError, request: Request) -> JSONResponse:
    """Convert domain errors to RFC 7807 responses."""
    instance = str(request.url.path)
    problem: ProblemDetail

    if isinstance(error, EntityNotFoundError):
        problem = ProblemDetailFactory.not_found(
            detail=str(error),
            instance=instance,
            resource_type=error.kind,
            resource_id=error.entity_id,
        )
    elif isinstance(error, NotFoundError):
        problem = ProblemDetailFactory.not_found(
            detail=str(error), instance=instance, resource_type="log"
        )
    elif isinstance(error, AuthenticationError):
        problem = ProblemDetailFactory.authentication_required(
            detail=str(error), instance=instance
        )
    elif isinstance(error, PermissionDeniedError):
        problem = ProblemDetailFactory.permission_denied(
            detail=str(error), instance=instance
        )
    elif isinstance(error, ValidationError):
        problem = ProblemDetailFactory.validation_failed(
            detail=str(error),
            instance=instance,
            field_errors=_extract_field_errors(error),
        )
    else:
        problem = ProblemDetailFactory.internal_server_error(
            detail="An unexpected error occurred. Please try again.",
            instance=instance,
        )

    return problem_response(problem)


def handle_validation_error(error: ValueError, request: Request) -> JSONResponse:
    problem = ProblemDetailFactory.validation_failed(
        detail=str(error),
        instance=str(request.url.path),
        field_errors=[
            {
                "field": "unknown",
                "code": ErrorCodes.FIELD_INVALID_VALUE,
                "message": str(error),
            }
        ],
    )
    return problem_response(problem)


def handle_request_validation_error(
    error: RequestValidationError, request: Request
) -> JSONResponse:
    """Report query, path and body validation failures field by field."""
    field_errors = [
        {
            "field": ".".join(
                str(part)
                for part in item["loc"]
                if part not in ("body", "query", "path", "header")
            )
            or "unknown",
            "code": item["type"],
            "message": item["msg"],
        }
        for item in error.errors()
    ]
    problem = ProblemDetailFactory.validation_failed(
        detail="Request validation failed",
        instance=str(request.url.path),
        field_errors=field_errors,
    )
    return problem_response(problem)


def _extract_field_errors(error: ValidationError) -> list[dict[str, str]]:
    """Extract field-specific errors from ValidationError."""
    if isinstance(error, PayloadMismatchError):
        return [
            {
                "field": "payload",
                "code": ErrorCodes.PAYLOAD_MISMATCH,
                "message": str(error),
            }
        ]

    errors = []
    error_msg = str(error).lower()

    if "name" in error_msg:
        if "empty" in error_msg:
            errors.append(
                {
                    "field": "name",
                    "code": ErrorCodes.FIELD_REQUIRED,
                    "message": "Name is required",
                }
            )
        elif "longer" in error_msg:
            errors.append(
                {
                    "field": "name",
                    "code": ErrorCodes.FIELD_TOO_LONG,
                    "message": "Name is too long",
                }
            )
        elif "control characters" in error_msg:
            errors.append(
                {
                    "field": "name",
                    "code": ErrorCodes.FIELD_INVALID_FORMAT,
                    "message": "Name contains invalid characters",
                }
            )

    if not errors:
        errors.append(
            {
                "field": "unknown",
                "code": ErrorCodes.VALIDATION_FAILED,
                "message": str(error),
            }
        )
    return errors

"""
Failure envelope and error classification.

Every failure that reaches a client is classified and explained through
the ApiResponse envelope. Known failures carry a FailureKind so the client
can tell "the shop is not configured" apart from "the request failed".

Outcomes:
- known_failure: a classified failure with a FailureKind and a reason
- unknown_failure: an unhandled fault, reported with a fixed message

All failure envelopes pass through `finalize_response()` before leaving
the application's exception handlers.
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """What went wrong, as reported to the client."""

    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    # The write would break a reference other catalog rows depend on
    CONFLICT = "conflict"

    # Operator has not filled in the settings; retrying will not help
    CONFIGURATION_MISSING = "configuration_missing"

    # Catalog store down
    SERVICE_UNAVAILABLE = "service_unavailable"
    # Telegram or the assistant endpoint rejected the call
    EXTERNAL_API_ERROR = "external_api_error"

    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


class FailureDetail(BaseModel):
    """Why a request failed and what the customer can do about it."""

    kind: FailureKind
    message: str = Field(..., description="Customer-facing explanation")
    detail: str | None = Field(default=None, description="Technical reason, safe to show")
    suggestion: str | None = Field(default=None, description="Next step for the customer")


class ApiResponse(BaseModel):
    """Response envelope for classified failures."""

    outcome: OutcomeType
    failure: FailureDetail


# =============================================================================
# KNOWN ERRORS
# =============================================================================


class KnownError(Exception):
    """
    A failure the service can explain to the customer.

    Raised anywhere below the routers; the app-level handler renders it as
    a known_failure envelope with `status_code`.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse:
        """Convert to a known-failure envelope."""
        response = ApiResponse(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=self.kind,
                message=self.message,
                detail=self.detail,
                suggestion=self.suggestion,
            ),
        )
        return finalize_response(response)


class NotFoundError(KnownError):
    """A requested game, hero, account or session does not exist."""

    def __init__(self, entity: str, identifier: str):
        self.entity = entity
        self.identifier = identifier
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"{entity.capitalize()} '{identifier}' not found.",
            status_code=404,
        )


class RecordParseError(KnownError):
    """A catalog record is malformed and cannot be turned into an entity."""

    def __init__(self, entity: str, reason: str):
        self.entity = entity
        self.reason = reason
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=f"Invalid {entity} record.",
            detail=reason,
            status_code=422,
        )


class CatalogConflictError(KnownError):
    """
    An admin write would orphan or shadow other catalog rows.

    Raised when a hero still listed on account rosters is deleted or moved
    to another game, when a game with accounts is deleted, and when a game
    slug is already taken.
    """

    def __init__(self, entity: str, identifier: str, reason: str):
        self.entity = entity
        self.identifier = identifier
        self.reason = reason
        super().__init__(
            kind=FailureKind.CONFLICT,
            message=f"{entity.capitalize()} '{identifier}' cannot be changed.",
            detail=reason,
            status_code=409,
        )


class LeadValidationError(KnownError):
    """A purchase lead is missing its contact method, contact value or consent."""

    def __init__(self, reason: str):
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message="The purchase request is incomplete.",
            detail=reason,
            suggestion="Choose a contact method, enter your contact and accept the terms.",
            status_code=422,
        )


class ConfigurationMissingError(KnownError):
    """
    An action depends on configuration the operator has not filled in.

    Distinct from a delivery failure: retrying will not help until the
    operator completes the settings.
    """

    def __init__(self, feature: str, missing: list[str]):
        self.feature = feature
        self.missing = missing
        super().__init__(
            kind=FailureKind.CONFIGURATION_MISSING,
            message=f"The {feature} is not configured yet.",
            detail=f"Missing settings: {', '.join(missing)}",
            suggestion="Please contact the shop directly or try again later.",
            status_code=503,
        )


class DeliveryError(KnownError):
    """An external service rejected or failed to receive a request."""

    def __init__(self, service: str, detail: str | None = None):
        self.service = service
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message=f"Could not reach the {service}.",
            detail=detail,
            suggestion="Please submit the request again.",
            status_code=502,
        )


class StoreUnavailableError(KnownError):
    """The catalog store could not be read or written."""

    def __init__(self, detail: str | None = None):
        super().__init__(
            kind=FailureKind.SERVICE_UNAVAILABLE,
            message="The catalog is temporarily unavailable.",
            detail=detail,
            suggestion="Refresh the page in a moment.",
            status_code=503,
        )


# =============================================================================
# ENVELOPE CONSTRUCTION
# =============================================================================

UNKNOWN_FAILURE_MESSAGE = "Something went wrong on our side."
UNKNOWN_FAILURE_SUGGESTION = "Return to the home page and try again."


def finalize_response(response: ApiResponse) -> ApiResponse:
    """
    Check that an envelope's outcome agrees with its failure kind.

    Unknown failures always carry FailureKind.UNKNOWN and known failures
    never do.

    Raises:
        ValueError: If the envelope structure is inconsistent
    """
    is_unknown_kind = response.failure.kind == FailureKind.UNKNOWN
    if (response.outcome == OutcomeType.UNKNOWN_FAILURE) != is_unknown_kind:
        msg = (
            f"{response.outcome.value} response cannot carry "
            f"failure kind {response.failure.kind.value}"
        )
        raise ValueError(msg)
    return response


def create_unknown_failure(
    exception: Exception,
    include_type: bool = True,
) -> ApiResponse:
    """
    Create the generic recoverable failure for an unhandled exception.

    The message is fixed. Only the exception type name is exposed.
    """
    detail = type(exception).__name__ if include_type else None

    response = ApiResponse(
        outcome=OutcomeType.UNKNOWN_FAILURE,
        failure=FailureDetail(
            kind=FailureKind.UNKNOWN,
            message=UNKNOWN_FAILURE_MESSAGE,
            detail=detail,
            suggestion=UNKNOWN_FAILURE_SUGGESTION,
        ),
    )
    return finalize_response(response)

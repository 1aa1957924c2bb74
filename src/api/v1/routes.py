"""
API v1 routes.

Defines REST endpoints for the Account Recovery API.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.dependencies import get_masker, get_recovery_service
from src.api.models import (
    ErrorResponse,
    NotificationChannelResponse,
    RecoveryChannelEntry,
    RecoveryInitRequest,
    RecoveryInitResponse,
    RecoveryValidateRequest,
    RecoveryValidateResponse,
)
from src.domain.channels import parse_channel_selection
from src.domain.exceptions import (
    ExpiredRecoveryCode,
    MultipleUsersMatched,
    NoAccountRecoveryData,
    NoUserFound,
    RecoveryClientError,
    RecoveryError,
    qualify_error_code,
)
from src.domain.masking import ChannelMasker
from src.domain.recovery import AccountRecoveryService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["v1"])

SERVER_ERROR_CODE = qualify_error_code("65000")
SERVER_ERROR_MESSAGE = "Internal server error"

_CLIENT_ERROR_STATUS: dict[type[RecoveryClientError], int] = {
    NoUserFound: status.HTTP_404_NOT_FOUND,
    NoAccountRecoveryData: status.HTTP_404_NOT_FOUND,
    MultipleUsersMatched: status.HTTP_409_CONFLICT,
    ExpiredRecoveryCode: status.HTTP_410_GONE,
}


def to_http_exception(error: RecoveryError) -> HTTPException:
    """
    Map a domain error to an HTTP error response.

    Client errors expose their stable code and message. Server errors are
    logged with their cause and presented with a generic code.
    """
    if isinstance(error, RecoveryClientError):
        logger.warning("Recovery request rejected: %s", error.code)
        return HTTPException(
            status_code=_CLIENT_ERROR_STATUS.get(type(error), status.HTTP_400_BAD_REQUEST),
            detail={"code": error.code, "message": error.message},
        )

    logger.error("Recovery request failed: %s", error, exc_info=error)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"code": SERVER_ERROR_CODE, "message": SERVER_ERROR_MESSAGE},
    )


@router.post(
    "/recovery/init",
    response_model=RecoveryInitResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Recovery not possible for the request"},
        404: {"model": ErrorResponse, "description": "No user matched the claims"},
        409: {"model": ErrorResponse, "description": "Multiple users matched the claims"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
        422: {"description": "Validation error"},
    },
    summary="Initiate account recovery",
    description="Submit identifying claims to find the account and the channels "
    "it can be recovered through. A recovery code bound to those channels is issued.",
)
async def init_recovery(
    request_data: RecoveryInitRequest,
    service: AccountRecoveryService = Depends(get_recovery_service),
) -> RecoveryInitResponse:
    """
    Initiate account recovery.

    - **claims**: Identifying claims (claim URI -> value)
    - **tenant_domain**: Tenant of the user
    - **scenario**: Recovery scenario
    - **properties**: Optional meta properties
    """
    try:
        info = service.resolve_recovery(
            request_data.claims,
            request_data.tenant_domain,
            request_data.scenario,
            request_data.properties,
        )
    except RecoveryError as e:
        raise to_http_exception(e) from None

    return RecoveryInitResponse(
        username=info.username,
        recovery_code=info.recovery_code,
        channels=[
            NotificationChannelResponse(
                id=channel.id, type=channel.type, value=channel.value, preferred=channel.preferred
            )
            for channel in info.channels
        ],
    )


@router.post(
    "/recovery/validate",
    response_model=RecoveryValidateResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid recovery code"},
        404: {"model": ErrorResponse, "description": "No recovery data for the code"},
        410: {"model": ErrorResponse, "description": "Expired recovery code"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
        422: {"description": "Validation error"},
    },
    summary="Validate a recovery code",
    description="Check that a recovery code is valid for the given recovery step "
    "and return the recovery data bound to it.",
)
async def validate_recovery_code(
    request_data: RecoveryValidateRequest,
    service: AccountRecoveryService = Depends(get_recovery_service),
    masker: ChannelMasker = Depends(get_masker),
) -> RecoveryValidateResponse:
    """
    Validate a recovery code.

    - **code**: Recovery code issued by /recovery/init
    - **step**: Recovery step the code is expected to be at
    """
    try:
        record = service.validate_recovery_code(request_data.code, request_data.step)
    except RecoveryError as e:
        raise to_http_exception(e) from None

    return RecoveryValidateResponse(
        username=record.account.username,
        tenant_domain=record.account.tenant_domain,
        user_store_domain=record.account.user_store_domain,
        scenario=record.scenario,
        step=record.step,
        channels=[
            RecoveryChannelEntry(type=channel_type, value=masker.mask(channel_type, value))
            for channel_type, value in parse_channel_selection(record.remaining_set_ids)
        ],
    )

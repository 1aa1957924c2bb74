"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from pydantic import BaseModel, Field

from src.domain.ports import ChannelType, RecoveryScenario, RecoveryStep


class RecoveryInitRequest(BaseModel):
    """Request model for initiating account recovery."""

    claims: dict[str, str] = Field(
        ...,
        description="Identifying claims of the user (claim URI -> value)",
    )
    tenant_domain: str = Field(default="carbon.super", min_length=1)
    scenario: RecoveryScenario = RecoveryScenario.USERNAME_RECOVERY
    properties: dict[str, str] = Field(default_factory=dict)


class NotificationChannelResponse(BaseModel):
    """A recovery channel with its masked value."""

    id: int
    type: ChannelType
    value: str
    preferred: bool


class RecoveryInitResponse(BaseModel):
    """Response model for a successful recovery initiation."""

    username: str
    recovery_code: str
    channels: list[NotificationChannelResponse]


class RecoveryValidateRequest(BaseModel):
    """Request model for recovery code validation."""

    code: str = Field(..., min_length=1, max_length=64, description="Recovery code")
    step: RecoveryStep = RecoveryStep.SEND_RECOVERY_INFORMATION


class RecoveryChannelEntry(BaseModel):
    """Channel bound to a recovery code (masked value)."""

    type: ChannelType
    value: str


class RecoveryValidateResponse(BaseModel):
    """Response model for a successfully validated recovery code."""

    username: str
    tenant_domain: str
    user_store_domain: str
    scenario: RecoveryScenario
    step: RecoveryStep
    channels: list[RecoveryChannelEntry]


class ErrorDetail(BaseModel):
    """Stable error code and message."""

    code: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: ErrorDetail

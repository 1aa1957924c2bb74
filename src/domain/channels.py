"""
Channel selector - Notification channel eligibility for recovery.

Channel Selection Policy
========================

External management (notifications sent by a system outside this service):
    A single EXTERNAL placeholder channel is returned. The directory is
    not consulted.

Internal management:
    Claims for every supported channel (value + verified flag), the
    preferred channel and the user's roles are fetched in one call.

    - Self-registered users (self sign-up role present): a channel is
      eligible only when it is verified AND has a value.
    - Other users (administratively created): a channel is eligible
      whenever it has a value, verified or not.

    The channel whose type equals the preferred-channel claim is marked
    preferred.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from .exceptions import (
    DirectoryError,
    NoChannelsConfigured,
    NoVerifiedChannelsForUser,
    UserClaimsLoadError,
)
from .models import NotificationChannel
from .ports import ChannelType, TenantResolver, UserDirectory

logger = logging.getLogger(__name__)

EMAIL_CLAIM = "urn:identity:claims:emailaddress"
EMAIL_VERIFIED_CLAIM = "urn:identity:claims:identity:emailVerified"
MOBILE_CLAIM = "urn:identity:claims:mobile"
MOBILE_VERIFIED_CLAIM = "urn:identity:claims:identity:phoneVerified"
PREFERRED_CHANNEL_CLAIM = "urn:identity:claims:identity:preferredChannel"
ROLES_CLAIM = "urn:identity:claims:roles"

SELF_SIGNUP_ROLE = "Internal/selfsignup"
ROLE_SEPARATOR = ","

CHANNEL_ATTRIBUTE_SEPARATOR = ":"
CHANNEL_LIST_SEPARATOR = ","

MANAGE_NOTIFICATIONS_INTERNALLY_PROPERTY = "manageNotificationsInternally"


@dataclass(frozen=True)
class ChannelDefinition:
    """Supported channel type and the claims holding its value and verified flag."""

    type: ChannelType
    value_claim: str
    verified_claim: str


DEFAULT_CHANNELS: tuple[ChannelDefinition, ...] = (
    ChannelDefinition(ChannelType.EMAIL, EMAIL_CLAIM, EMAIL_VERIFIED_CLAIM),
    ChannelDefinition(ChannelType.SMS, MOBILE_CLAIM, MOBILE_VERIFIED_CLAIM),
)

EXTERNAL_CHANNEL = NotificationChannel(type=ChannelType.EXTERNAL)


def parse_bool(value: str | None) -> bool:
    """True only for the string "true", ignoring case."""
    return value is not None and value.strip().lower() == "true"


def is_notifications_internally_managed(
    properties: Mapping[str, str] | None, default: bool = True
) -> bool:
    """Per-request property overrides the configured notification management mode."""
    if properties and MANAGE_NOTIFICATIONS_INTERNALLY_PROPERTY in properties:
        return parse_bool(properties[MANAGE_NOTIFICATIONS_INTERNALLY_PROPERTY])
    return default


def serialize_channel_selection(channels: tuple[NotificationChannel, ...]) -> str:
    """
    Flatten a channel selection for persistence.

    Format: ``TYPE:value,`` per channel, in order (trailing separator kept).
    """
    return "".join(
        f"{channel.type.value}{CHANNEL_ATTRIBUTE_SEPARATOR}{channel.value}{CHANNEL_LIST_SEPARATOR}"
        for channel in channels
    )


def parse_channel_selection(serialized: str) -> list[tuple[ChannelType, str]]:
    """
    Reverse ``serialize_channel_selection`` into (type, value) pairs.

    Values may themselves contain the list separator. A segment starts a
    new entry only when it begins with a known ``TYPE:`` prefix; any other
    segment is joined back onto the previous value.
    """
    segments = serialized.split(CHANNEL_LIST_SEPARATOR)
    if segments and not segments[-1]:
        segments.pop()

    pairs: list[tuple[ChannelType, str]] = []
    for segment in segments:
        channel_type = _channel_type_prefix(segment)
        if channel_type is not None:
            pairs.append((channel_type, segment[len(channel_type.value) + 1 :]))
        elif pairs:
            previous_type, previous_value = pairs[-1]
            pairs[-1] = (previous_type, previous_value + CHANNEL_LIST_SEPARATOR + segment)
        elif segment:
            logger.warning("Skipping malformed channel selection segment")
    return pairs


def _channel_type_prefix(segment: str) -> ChannelType | None:
    name, separator, _ = segment.partition(CHANNEL_ATTRIBUTE_SEPARATOR)
    if not separator:
        return None
    try:
        return ChannelType(name)
    except ValueError:
        return None


@dataclass(frozen=True)
class ChannelSelector:
    """Computes the notification channels a resolved account may recover through."""

    directory: UserDirectory
    tenant_resolver: TenantResolver
    channels: tuple[ChannelDefinition, ...] = DEFAULT_CHANNELS
    preferred_channel_claim: str = PREFERRED_CHANNEL_CLAIM
    roles_claim: str = ROLES_CLAIM
    self_signup_role: str = SELF_SIGNUP_ROLE
    role_separator: str = ROLE_SEPARATOR

    def select(
        self, username: str, tenant_domain: str, internally_managed: bool
    ) -> tuple[NotificationChannel, ...]:
        """
        Return the ordered, non-empty channel list for the account.

        Raises:
            NoChannelsConfigured: Directory returned no claim values
            NoVerifiedChannelsForUser: No channel is eligible
            UserClaimsLoadError: Directory claim load failed
        """
        if not internally_managed:
            return (EXTERNAL_CHANNEL,)

        claim_values = self._load_channel_claims(username, tenant_domain)
        if not claim_values:
            raise NoChannelsConfigured()

        channels = self._eligible_channels(claim_values)
        if not channels:
            raise NoVerifiedChannelsForUser()
        return channels

    def required_claims(self) -> list[str]:
        claims = []
        for channel in self.channels:
            claims.append(channel.value_claim)
            claims.append(channel.verified_claim)
        claims.append(self.preferred_channel_claim)
        # Eligibility rules differ for self signed-up users.
        claims.append(self.roles_claim)
        return claims

    def is_self_registered(self, roles: str | None) -> bool:
        if not roles:
            return False
        return self.self_signup_role in (role.strip() for role in roles.split(self.role_separator))

    def _load_channel_claims(self, username: str, tenant_domain: str) -> dict[str, str]:
        tenant_id = self.tenant_resolver.get_tenant_id(tenant_domain)
        try:
            return self.directory.get_claim_values(tenant_id, username, self.required_claims())
        except DirectoryError as e:
            logger.debug("Error getting channel claims of user in tenant: %s", tenant_domain)
            raise UserClaimsLoadError(tenant_domain) from e

    def _eligible_channels(self, claim_values: Mapping[str, str]) -> tuple[NotificationChannel, ...]:
        self_registered = self.is_self_registered(claim_values.get(self.roles_claim))
        preferred_channel = claim_values.get(self.preferred_channel_claim) or ""

        eligible = []
        for definition in self.channels:
            value = claim_values.get(definition.value_claim) or ""
            verified = parse_bool(claim_values.get(definition.verified_claim))
            if not value:
                continue
            if self_registered and not verified:
                continue
            eligible.append(
                NotificationChannel(
                    type=definition.type,
                    value=value,
                    verified=verified,
                    preferred=bool(preferred_channel) and definition.type.value == preferred_channel,
                )
            )
        logger.debug(
            "%d eligible channel(s), self registered: %s", len(eligible), self_registered
        )
        return tuple(eligible)

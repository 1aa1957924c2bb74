"""
Unit tests for ChannelSelector and channel serialization.

Tests verify:
- External management returns the EXTERNAL placeholder only
- Self-registered users need verified channels
- Administratively created users may use unverified channels
- Preferred channel marking
- Required claim list and directory error handling
"""

from unittest.mock import Mock

import pytest

from src.domain.channels import (
    EMAIL_CLAIM,
    EMAIL_VERIFIED_CLAIM,
    MOBILE_CLAIM,
    MOBILE_VERIFIED_CLAIM,
    PREFERRED_CHANNEL_CLAIM,
    ROLES_CLAIM,
    ChannelSelector,
    is_notifications_internally_managed,
    parse_bool,
    parse_channel_selection,
    serialize_channel_selection,
)
from src.domain.exceptions import (
    DirectoryError,
    NoChannelsConfigured,
    NoVerifiedChannelsForUser,
    UserClaimsLoadError,
)
from src.domain.models import NotificationChannel
from src.domain.ports import ChannelType
from tests.conftest import TENANT_DOMAIN, TENANT_ID, channel_claims

SELF_SIGNUP = "Internal/everyone,Internal/selfsignup"
ADMIN_CREATED = "Internal/everyone,admin"


def selector_with(directory: Mock, tenant_resolver: Mock, claims: dict[str, str]) -> ChannelSelector:
    directory.get_claim_values.return_value = claims
    return ChannelSelector(directory=directory, tenant_resolver=tenant_resolver)


class TestExternalManagement:
    """Tests for externally managed notifications."""

    def test_returns_single_external_channel(self, directory: Mock, tenant_resolver: Mock) -> None:
        """External mode returns one EXTERNAL channel with empty value, not preferred."""
        selector = ChannelSelector(directory=directory, tenant_resolver=tenant_resolver)

        channels = selector.select("alice", TENANT_DOMAIN, internally_managed=False)

        assert channels == (NotificationChannel(type=ChannelType.EXTERNAL, value="", preferred=False),)

    def test_directory_not_consulted(self, directory: Mock, tenant_resolver: Mock) -> None:
        """External mode does not look up user claims."""
        directory.get_claim_values.side_effect = DirectoryError("must not be called")
        selector = ChannelSelector(directory=directory, tenant_resolver=tenant_resolver)

        selector.select("alice", TENANT_DOMAIN, internally_managed=False)

        directory.get_claim_values.assert_not_called()


class TestRequiredClaims:
    """Tests for the claims fetched in internal mode."""

    def test_required_claims_order(self, directory: Mock, tenant_resolver: Mock) -> None:
        """Value and verified claims per channel, then preferred channel, then roles."""
        selector = ChannelSelector(directory=directory, tenant_resolver=tenant_resolver)

        assert selector.required_claims() == [
            EMAIL_CLAIM,
            EMAIL_VERIFIED_CLAIM,
            MOBILE_CLAIM,
            MOBILE_VERIFIED_CLAIM,
            PREFERRED_CHANNEL_CLAIM,
            ROLES_CLAIM,
        ]

    def test_claims_fetched_in_one_call(self, directory: Mock, tenant_resolver: Mock) -> None:
        """All channel claims are fetched with a single directory call."""
        selector = selector_with(
            directory, tenant_resolver, channel_claims(email="a@example.com", roles=ADMIN_CREATED)
        )

        selector.select("alice", TENANT_DOMAIN, internally_managed=True)

        directory.get_claim_values.assert_called_once_with(
            TENANT_ID, "alice", selector.required_claims()
        )


class TestSelfRegisteredUser:
    """Tests for users holding the self sign-up role."""

    def test_only_verified_channels(self, directory: Mock, tenant_resolver: Mock) -> None:
        """Verified SMS and unverified email: only SMS is eligible."""
        selector = selector_with(
            directory,
            tenant_resolver,
            channel_claims(
                email="alice@example.com",
                email_verified="false",
                mobile="+15550100",
                mobile_verified="true",
                roles=SELF_SIGNUP,
            ),
        )

        channels = selector.select("alice", TENANT_DOMAIN, internally_managed=True)

        assert [c.type for c in channels] == [ChannelType.SMS]
        assert channels[0].value == "+15550100"
        assert channels[0].verified is True

    def test_verified_without_value_excluded(self, directory: Mock, tenant_resolver: Mock) -> None:
        """A verified flag without a channel value is not eligible."""
        selector = selector_with(
            directory,
            tenant_resolver,
            channel_claims(
                email_verified="true",
                mobile="+15550100",
                mobile_verified="true",
                roles=SELF_SIGNUP,
            ),
        )

        channels = selector.select("alice", TENANT_DOMAIN, internally_managed=True)

        assert [c.type for c in channels] == [ChannelType.SMS]

    def test_no_verified_channels_raise(self, directory: Mock, tenant_resolver: Mock) -> None:
        """A self-registered user without verified channels cannot recover."""
        selector = selector_with(
            directory,
            tenant_resolver,
            channel_claims(email="alice@example.com", mobile="+15550100", roles=SELF_SIGNUP),
        )

        with pytest.raises(NoVerifiedChannelsForUser):
            selector.select("alice", TENANT_DOMAIN, internally_managed=True)

    def test_verified_flag_case_insensitive(self, directory: Mock, tenant_resolver: Mock) -> None:
        """Verified flags are parsed case-insensitively."""
        selector = selector_with(
            directory,
            tenant_resolver,
            channel_claims(email="alice@example.com", email_verified="TRUE", roles=SELF_SIGNUP),
        )

        channels = selector.select("alice", TENANT_DOMAIN, internally_managed=True)

        assert [c.type for c in channels] == [ChannelType.EMAIL]

    def test_role_entries_are_stripped(self, directory: Mock, tenant_resolver: Mock) -> None:
        """Whitespace around role entries does not hide the self sign-up role."""
        selector = ChannelSelector(directory=directory, tenant_resolver=tenant_resolver)

        assert selector.is_self_registered("admin, Internal/selfsignup")
        assert not selector.is_self_registered("admin,Internal/selfsignupx")
        assert not selector.is_self_registered(None)


class TestAdministrativelyCreatedUser:
    """Tests for users without the self sign-up role."""

    def test_unverified_channel_included(self, directory: Mock, tenant_resolver: Mock) -> None:
        """An unverified but present email is eligible."""
        selector = selector_with(
            directory,
            tenant_resolver,
            channel_claims(email="alice@example.com", email_verified="false", roles=ADMIN_CREATED),
        )

        channels = selector.select("alice", TENANT_DOMAIN, internally_managed=True)

        assert channels == (
            NotificationChannel(type=ChannelType.EMAIL, value="alice@example.com", verified=False),
        )

    def test_missing_roles_claim_is_not_self_registered(
        self, directory: Mock, tenant_resolver: Mock
    ) -> None:
        """Users without a roles claim follow the administrative rule."""
        selector = selector_with(
            directory, tenant_resolver, channel_claims(mobile="+15550100")
        )

        channels = selector.select("alice", TENANT_DOMAIN, internally_managed=True)

        assert [c.type for c in channels] == [ChannelType.SMS]

    def test_channel_order_is_email_then_sms(self, directory: Mock, tenant_resolver: Mock) -> None:
        """Channels keep the supported channel order."""
        selector = selector_with(
            directory,
            tenant_resolver,
            channel_claims(email="alice@example.com", mobile="+15550100", roles=ADMIN_CREATED),
        )

        channels = selector.select("alice", TENANT_DOMAIN, internally_managed=True)

        assert [c.type for c in channels] == [ChannelType.EMAIL, ChannelType.SMS]

    def test_no_channel_values_raise(self, directory: Mock, tenant_resolver: Mock) -> None:
        """Claims without any channel value raise NoVerifiedChannelsForUser."""
        selector = selector_with(directory, tenant_resolver, channel_claims(roles=ADMIN_CREATED))

        with pytest.raises(NoVerifiedChannelsForUser):
            selector.select("alice", TENANT_DOMAIN, internally_managed=True)


class TestPreferredChannel:
    """Tests for preferred channel marking."""

    def test_preferred_channel_marked(self, directory: Mock, tenant_resolver: Mock) -> None:
        """The channel matching the preferred-channel claim is preferred."""
        selector = selector_with(
            directory,
            tenant_resolver,
            channel_claims(
                email="alice@example.com", mobile="+15550100", preferred="SMS", roles=ADMIN_CREATED
            ),
        )

        channels = selector.select("alice", TENANT_DOMAIN, internally_managed=True)

        assert {c.type: c.preferred for c in channels} == {
            ChannelType.EMAIL: False,
            ChannelType.SMS: True,
        }

    def test_stale_preferred_channel_marks_nothing(
        self, directory: Mock, tenant_resolver: Mock
    ) -> None:
        """A preferred channel that is not eligible marks no channel."""
        selector = selector_with(
            directory,
            tenant_resolver,
            channel_claims(email="alice@example.com", preferred="SMS", roles=ADMIN_CREATED),
        )

        channels = selector.select("alice", TENANT_DOMAIN, internally_managed=True)

        assert [c.preferred for c in channels] == [False]

    def test_unknown_preferred_value(self, directory: Mock, tenant_resolver: Mock) -> None:
        """An unknown preferred value does not fail selection."""
        selector = selector_with(
            directory,
            tenant_resolver,
            channel_claims(email="alice@example.com", preferred="PIGEON"),
        )

        channels = selector.select("alice", TENANT_DOMAIN, internally_managed=True)

        assert not any(c.preferred for c in channels)


class TestDirectoryResults:
    """Tests for empty and failing directory lookups."""

    def test_no_claim_values_raise(self, directory: Mock, tenant_resolver: Mock) -> None:
        """No claim values at all raise NoChannelsConfigured."""
        selector = selector_with(directory, tenant_resolver, {})

        with pytest.raises(NoChannelsConfigured):
            selector.select("alice", TENANT_DOMAIN, internally_managed=True)

    def test_none_claim_values_raise(self, directory: Mock, tenant_resolver: Mock) -> None:
        """A None result is treated as no claim values."""
        directory.get_claim_values.return_value = None
        selector = ChannelSelector(directory=directory, tenant_resolver=tenant_resolver)

        with pytest.raises(NoChannelsConfigured):
            selector.select("alice", TENANT_DOMAIN, internally_managed=True)

    def test_directory_error_wrapped(self, directory: Mock, tenant_resolver: Mock) -> None:
        """DirectoryError becomes UserClaimsLoadError with the cause chained."""
        cause = DirectoryError("timeout")
        directory.get_claim_values.side_effect = cause
        selector = ChannelSelector(directory=directory, tenant_resolver=tenant_resolver)

        with pytest.raises(UserClaimsLoadError) as exc_info:
            selector.select("alice", TENANT_DOMAIN, internally_managed=True)

        assert exc_info.value.__cause__ is cause


class TestNotificationManagement:
    """Tests for is_notifications_internally_managed and parse_bool."""

    def test_default_used_without_property(self) -> None:
        """The configured default applies when the property is absent."""
        assert is_notifications_internally_managed({}, default=True) is True
        assert is_notifications_internally_managed(None, default=False) is False

    def test_property_overrides_default(self) -> None:
        """The request property overrides the configured default."""
        props = {"manageNotificationsInternally": "false"}
        assert is_notifications_internally_managed(props, default=True) is False
        props = {"manageNotificationsInternally": "True"}
        assert is_notifications_internally_managed(props, default=False) is True

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("true", True), ("True", True), ("false", False), ("yes", False), ("", False), (None, False)],
    )
    def test_parse_bool(self, value: str | None, expected: bool) -> None:
        """Only "true" (any case) parses as True."""
        assert parse_bool(value) is expected


class TestChannelSerialization:
    """Tests for the persisted channel selection format."""

    def test_serialize_format(self) -> None:
        """Channels serialize as TYPE:value pairs each followed by a comma."""
        channels = (
            NotificationChannel(type=ChannelType.EMAIL, value="alice@example.com"),
            NotificationChannel(type=ChannelType.SMS, value="+15550100"),
        )

        assert serialize_channel_selection(channels) == "EMAIL:alice@example.com,SMS:+15550100,"

    def test_serialize_external_channel(self) -> None:
        """The external placeholder serializes with an empty value."""
        channels = (NotificationChannel(type=ChannelType.EXTERNAL),)

        assert serialize_channel_selection(channels) == "EXTERNAL:,"

    def test_parse_splits_on_first_attribute_separator(self) -> None:
        """Values may contain the attribute separator."""
        assert parse_channel_selection("EMAIL:a:b@example.com,EXTERNAL:,") == [
            (ChannelType.EMAIL, "a:b@example.com"),
            (ChannelType.EXTERNAL, ""),
        ]

    def test_parse_empty(self) -> None:
        """An empty string parses to no channels."""
        assert parse_channel_selection("") == []

    def test_values_containing_list_separator_round_trip(self) -> None:
        """Values with commas come back intact."""
        channels = (
            NotificationChannel(type=ChannelType.EMAIL, value='"a,b"@example.com'),
            NotificationChannel(type=ChannelType.SMS, value="+1555,ext"),
        )

        assert parse_channel_selection(serialize_channel_selection(channels)) == [
            (ChannelType.EMAIL, '"a,b"@example.com'),
            (ChannelType.SMS, "+1555,ext"),
        ]

    def test_value_ending_with_list_separator_round_trips(self) -> None:
        """A trailing comma in a value is kept."""
        channels = (NotificationChannel(type=ChannelType.EMAIL, value="a@example.com,"),)

        assert parse_channel_selection(serialize_channel_selection(channels)) == [
            (ChannelType.EMAIL, "a@example.com,")
        ]

    def test_unknown_leading_segment_skipped(self) -> None:
        """A leading segment without a known type is ignored instead of raising."""
        assert parse_channel_selection("FAX:123,EMAIL:a@example.com,") == [
            (ChannelType.EMAIL, "a@example.com")
        ]

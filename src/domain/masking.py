"""
Channel masker - Display-safe rendering of channel values.

Every character a pattern matches is replaced by the masking character,
so a masked value has the same length as the original.
"""

import re
from dataclasses import dataclass, field

from .ports import ChannelType

# Keeps the first character of the local part, the first character of
# the domain and the top-level domain.
EMAIL_MASKING_REGEX = r"(?<=.)[^@](?=[^@]*@)|(?<!@)[^@.](?=[^@]*\.[^@.]+$)"
# Keeps the last four characters.
MOBILE_MASKING_REGEX = r".(?=.{4})"
MASKING_CHARACTER = "*"


@dataclass(frozen=True)
class ChannelMasker:
    """Masks email addresses and mobile numbers with configured patterns."""

    email_pattern: str = EMAIL_MASKING_REGEX
    mobile_pattern: str = MOBILE_MASKING_REGEX
    masking_character: str = MASKING_CHARACTER
    _email_regex: re.Pattern = field(init=False, repr=False, compare=False)
    _mobile_regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if len(self.masking_character) != 1:
            raise ValueError("masking_character must be a single character")
        object.__setattr__(self, "_email_regex", re.compile(self.email_pattern))
        object.__setattr__(self, "_mobile_regex", re.compile(self.mobile_pattern))

    def mask(self, channel_type: ChannelType, value: str) -> str:
        if channel_type == ChannelType.EMAIL:
            return self.mask_email(value)
        if channel_type == ChannelType.SMS:
            return self.mask_mobile(value)
        return value

    def mask_email(self, email: str) -> str:
        if not email:
            return email
        return self._mask(self._email_regex, email)

    def mask_mobile(self, mobile: str) -> str:
        if not mobile:
            return mobile
        return self._mask(self._mobile_regex, mobile)

    def _mask(self, regex: re.Pattern, value: str) -> str:
        # One masking character per matched character.
        return regex.sub(lambda match: self.masking_character * len(match.group(0)), value)

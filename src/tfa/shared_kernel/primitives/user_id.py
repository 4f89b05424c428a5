from __future__ import annotations

from dataclasses import dataclass

_MAX_USER_ID_LENGTH = 255


@dataclass(frozen=True, slots=True)
class UserId:
    """
    UserId — opaque stable identifier of the user owning two-factor settings.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/ports/settings_repository.py
      - src/tfa/contexts/two_factor/adapters/inbound/api/deps/current_user.py
    """

    value: str

    def __post_init__(self) -> None:
        """
        Validate identifier is a non-empty, trimmed string of bounded length.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Host applications may use numeric ids, UUIDs, or usernames as keys.
        Raises:
            ValueError: If value is not a string, is blank, has surrounding
                whitespace, or is longer than 255 characters.
        Side Effects:
            None.
        """
        if not isinstance(self.value, str):
            raise ValueError(f"UserId requires str value, got {self.value!r}")
        if not self.value:
            raise ValueError("UserId requires non-empty value")
        if self.value != self.value.strip():
            raise ValueError("UserId value must not contain surrounding whitespace")
        if len(self.value) > _MAX_USER_ID_LENGTH:
            raise ValueError(f"UserId value must be at most {_MAX_USER_ID_LENGTH} characters")

    @classmethod
    def from_string(cls, raw_value: str) -> UserId:
        """
        Parse user identifier from raw request or storage value.

        Args:
            raw_value: Raw identifier string.
        Returns:
            UserId: Normalized identifier value object.
        Raises:
            ValueError: If value is blank after trimming.
        """
        return cls(raw_value.strip())

    def __str__(self) -> str:
        return self.value

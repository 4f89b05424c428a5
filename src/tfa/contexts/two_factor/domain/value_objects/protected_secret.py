from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ProtectedSecret:
    """
    ProtectedSecret — secret in storage form plus a marker of whether the vault changed it.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/ports/secret_vault.py
      - src/tfa/contexts/two_factor/application/use_cases/save_two_factor_settings.py
    """

    value: str
    transformed: bool

    def __post_init__(self) -> None:
        """
        Validate that an empty secret is never reported as transformed.

        Raises:
            ValueError: If value is not a string or empty value is marked transformed.
        """
        if not isinstance(self.value, str):
            raise ValueError("ProtectedSecret.value must be str")
        if not self.value and self.transformed:
            raise ValueError("ProtectedSecret.transformed must be false for empty value")

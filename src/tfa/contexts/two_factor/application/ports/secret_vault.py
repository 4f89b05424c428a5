from __future__ import annotations

from typing import Protocol

from tfa.contexts.two_factor.domain.value_objects import ProtectedSecret


class TwoFactorSecretVault(Protocol):
    """
    TwoFactorSecretVault — port protecting TOTP secrets at rest.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/adapters/outbound/security/vault/passthrough_secret_vault.py
      - src/tfa/contexts/two_factor/adapters/outbound/security/vault/
        aes_gcm_envelope_secret_vault.py
      - src/tfa/contexts/two_factor/application/use_cases/save_two_factor_settings.py

    Contract: `reveal(stored_secret=protect(secret=x).value, is_protected=True) == x`
    for any non-empty `x`, and `protect(secret="")` returns `("", transformed=False)`.
    """

    def protect(self, *, secret: str) -> ProtectedSecret:
        """
        Convert plaintext secret into storage form.

        Args:
            secret: Plaintext base32 secret, possibly empty.
        Returns:
            ProtectedSecret: Storage value and whether it differs from plaintext.
        Assumptions:
            Empty secret is passed through untouched.
        Raises:
            ValueError: If protection fails.
        Side Effects:
            None.
        """
        ...

    def reveal(self, *, stored_secret: str, is_protected: bool) -> str:
        """
        Convert stored secret back to plaintext for a single verification.

        Args:
            stored_secret: Secret as read from settings storage.
            is_protected: Stored `encrypted` flag of the settings record.
        Returns:
            str: Plaintext base32 secret.
        Assumptions:
            Unprotected values are returned as-is.
        Raises:
            ValueError: If protected value is malformed or fails authentication.
        Side Effects:
            None.
        """
        ...

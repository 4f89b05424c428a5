from __future__ import annotations

from tfa.contexts.two_factor.application.ports.secret_vault import TwoFactorSecretVault
from tfa.contexts.two_factor.domain.value_objects import ProtectedSecret


class PassthroughTwoFactorSecretVault(TwoFactorSecretVault):
    """
    PassthroughTwoFactorSecretVault — default vault storing secrets unchanged.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/ports/secret_vault.py
      - src/tfa/contexts/two_factor/adapters/outbound/security/vault/
        aes_gcm_envelope_secret_vault.py
      - apps/api/wiring/modules/two_factor.py
    """

    def protect(self, *, secret: str) -> ProtectedSecret:
        """
        Return secret as-is and report that nothing was transformed.

        Args:
            secret: Plaintext secret, possibly empty.
        Returns:
            ProtectedSecret: `(secret, transformed=False)`.
        Assumptions:
            Records written here keep `encrypted=False`.
        Raises:
            None.
        Side Effects:
            None.
        """
        return ProtectedSecret(value=secret, transformed=False)

    def reveal(self, *, stored_secret: str, is_protected: bool) -> str:
        """
        Return stored secret unchanged regardless of the protection flag.

        Args:
            stored_secret: Secret as read from settings storage.
            is_protected: Stored `encrypted` flag.
        Returns:
            str: Same value.
        """
        return stored_secret

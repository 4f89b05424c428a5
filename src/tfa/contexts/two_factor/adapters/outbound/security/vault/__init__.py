from .aes_gcm_envelope_secret_vault import AesGcmEnvelopeTwoFactorSecretVault
from .passthrough_secret_vault import PassthroughTwoFactorSecretVault

__all__ = [
    "AesGcmEnvelopeTwoFactorSecretVault",
    "PassthroughTwoFactorSecretVault",
]

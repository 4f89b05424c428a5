from __future__ import annotations

import base64
import binascii
import os
import struct

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from tfa.contexts.two_factor.application.ports.secret_vault import TwoFactorSecretVault
from tfa.contexts.two_factor.domain.value_objects import ProtectedSecret

_BLOB_VERSION_V1 = 1
_NONCE_LENGTH = 12
_DEK_LENGTH = 32
_GCM_TAG_LENGTH = 16
_HEADER_STRUCT = struct.Struct(">BBBH")
_ENVELOPE_AAD = b"tfa.two_factor.totp.secret.v1"
_SUPPORTED_KEK_LENGTHS = {16, 24, 32}


class AesGcmEnvelopeTwoFactorSecretVault(TwoFactorSecretVault):
    """
    AesGcmEnvelopeTwoFactorSecretVault — AES-GCM envelope encryption of TOTP secrets.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/ports/secret_vault.py
      - apps/api/wiring/modules/two_factor.py
      - alembic/versions/20261018_0001_two_factor_settings_v1.py

    Stored form is URL-safe base64 text of
    `header | dek_nonce | wrapped_dek | secret_nonce | ciphertext`, so it fits the
    text `secret` column next to plaintext records written before encryption
    was enabled.
    """

    def __init__(self, *, kek_b64: str) -> None:
        """
        Initialize vault with base64-encoded key-encryption key.

        Args:
            kek_b64: Base64-encoded KEK bytes (`TFA_SECRET_KEK_B64`).
        Returns:
            None.
        Assumptions:
            KEK length is one of AES key sizes (16/24/32 bytes).
        Raises:
            ValueError: If KEK is empty, malformed, or of unsupported length.
        Side Effects:
            None.
        """
        normalized_kek_b64 = kek_b64.strip()
        if not normalized_kek_b64:
            raise ValueError("AesGcmEnvelopeTwoFactorSecretVault requires non-empty kek_b64")
        try:
            kek_bytes = base64.b64decode(normalized_kek_b64, validate=True)
        except binascii.Error as error:
            raise ValueError("TFA_SECRET_KEK_B64 must be valid base64") from error
        if len(kek_bytes) not in _SUPPORTED_KEK_LENGTHS:
            raise ValueError("TFA_SECRET_KEK_B64 must decode to 16, 24, or 32 bytes for AES-GCM")
        self._kek = kek_bytes

    def protect(self, *, secret: str) -> ProtectedSecret:
        """
        Encrypt secret under a fresh data key wrapped by the KEK.

        Args:
            secret: Plaintext base32 secret, possibly empty.
        Returns:
            ProtectedSecret: Encoded envelope with `transformed=True`, or
                `("", transformed=False)` for empty input.
        Assumptions:
            Plaintext secret is never logged.
        Raises:
            None.
        Side Effects:
            Uses OS CSPRNG for data key and nonces.
        """
        if not secret:
            return ProtectedSecret(value="", transformed=False)

        dek = os.urandom(_DEK_LENGTH)
        dek_nonce = os.urandom(_NONCE_LENGTH)
        secret_nonce = os.urandom(_NONCE_LENGTH)
        wrapped_dek = AESGCM(self._kek).encrypt(dek_nonce, dek, _ENVELOPE_AAD)
        ciphertext = AESGCM(dek).encrypt(secret_nonce, secret.encode("utf-8"), _ENVELOPE_AAD)

        header = _HEADER_STRUCT.pack(
            _BLOB_VERSION_V1,
            len(dek_nonce),
            len(secret_nonce),
            len(wrapped_dek),
        )
        blob = b"".join((header, dek_nonce, wrapped_dek, secret_nonce, ciphertext))
        return ProtectedSecret(
            value=base64.urlsafe_b64encode(blob).decode("ascii"),
            transformed=True,
        )

    def reveal(self, *, stored_secret: str, is_protected: bool) -> str:
        """
        Decrypt envelope back to plaintext secret.

        Args:
            stored_secret: Stored value from settings record.
            is_protected: Stored `encrypted` flag; `False` returns value unchanged.
        Returns:
            str: Plaintext base32 secret.
        Assumptions:
            Decrypted value lives in memory only for one verification.
        Raises:
            ValueError: If envelope is malformed, uses another KEK, or was tampered with.
        Side Effects:
            None.
        """
        if not is_protected or not stored_secret:
            return stored_secret

        try:
            blob = base64.urlsafe_b64decode(stored_secret.encode("ascii"))
        except (binascii.Error, UnicodeEncodeError) as error:
            raise ValueError("Protected TOTP secret is not valid base64") from error

        dek_nonce, wrapped_dek, secret_nonce, ciphertext = _split_envelope(blob=blob)
        try:
            dek = AESGCM(self._kek).decrypt(dek_nonce, wrapped_dek, _ENVELOPE_AAD)
            plaintext = AESGCM(dek).decrypt(secret_nonce, ciphertext, _ENVELOPE_AAD)
        except InvalidTag as error:
            raise ValueError("Protected TOTP secret authentication failed") from error

        try:
            secret = plaintext.decode("utf-8")
        except UnicodeDecodeError as error:
            raise ValueError("Protected TOTP secret plaintext is not valid UTF-8") from error
        if not secret:
            raise ValueError("Protected TOTP secret plaintext is empty")
        return secret


def _split_envelope(*, blob: bytes) -> tuple[bytes, bytes, bytes, bytes]:
    """
    Validate envelope header and split payload into its four parts.

    Args:
        blob: Decoded envelope bytes.
    Returns:
        tuple[bytes, bytes, bytes, bytes]: `(dek_nonce, wrapped_dek, secret_nonce, ciphertext)`.
    Raises:
        ValueError: If version, lengths, or payload size are invalid.
    """
    if len(blob) < _HEADER_STRUCT.size:
        raise ValueError("Protected TOTP secret envelope is too short")
    version, dek_nonce_len, secret_nonce_len, wrapped_dek_len = _HEADER_STRUCT.unpack_from(blob)
    if version != _BLOB_VERSION_V1:
        raise ValueError("Unsupported protected TOTP secret envelope version")
    if dek_nonce_len != _NONCE_LENGTH or secret_nonce_len != _NONCE_LENGTH:
        raise ValueError("Protected TOTP secret envelope contains invalid nonce length")
    if wrapped_dek_len != _DEK_LENGTH + _GCM_TAG_LENGTH:
        raise ValueError("Protected TOTP secret envelope contains invalid wrapped key length")

    payload = blob[_HEADER_STRUCT.size :]
    secret_nonce_start = dek_nonce_len + wrapped_dek_len
    ciphertext_start = secret_nonce_start + secret_nonce_len
    if len(payload) <= ciphertext_start + _GCM_TAG_LENGTH:
        raise ValueError("Protected TOTP secret envelope payload is truncated")

    return (
        payload[:dek_nonce_len],
        payload[dek_nonce_len:secret_nonce_start],
        payload[secret_nonce_start:ciphertext_start],
        payload[ciphertext_start:],
    )

"""
TOTP second-factor authentication package.

Bounded contexts live under `tfa.contexts`, cross-context primitives under
`tfa.shared_kernel`, and runtime configuration loaders under `tfa.platform`.
"""

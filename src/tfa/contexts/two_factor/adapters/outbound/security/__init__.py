"""
Security adapters: TOTP codec (`totp`) and secret vaults (`vault`).
"""

"""
Outbound adapters of the two-factor context.

Subpackages are imported directly so that composition can check optional
libraries such as `pyotp` before the codec module loads them.
"""

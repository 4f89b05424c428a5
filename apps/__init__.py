"""Deployable applications built on the tfa package."""

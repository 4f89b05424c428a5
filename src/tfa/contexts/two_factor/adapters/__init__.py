"""
Adapters package for two-factor bounded context.
"""

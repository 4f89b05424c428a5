"""
Platform-level infrastructure shared across bounded contexts.
"""

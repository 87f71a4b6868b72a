"""
Shared helpers used by the engine.
"""

"""
Test support utilities for tradefeed tests.

Helpers that are not fixtures live here; see ``feeds`` for the fixed-width
line builders.
"""

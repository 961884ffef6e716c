"""
vigil: reactive validation over named fixtures.

Runs ordered chains of pluggable validation checks against shared input
values, cancelling stale runs whenever validation is requested again.
"""

__version__ = "0.1.0"

"""
LEMS - tournament management backend for FIRST LEGO League events.
"""

__version__ = "1.0.0"

"""
Frontline Core Module

Shared functionality for the commissioning tools:
- diagnostics: snapshot evaluation, rulebook and overall summary
"""

__version__ = '1.0.0'

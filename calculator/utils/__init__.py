"""
Utility functions for calculator.

Formatting helpers for script output.
"""

from calculator.utils.formatters import format_simulation_table

__all__ = [
    "format_simulation_table",
]

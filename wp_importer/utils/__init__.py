"""
Utility helpers used by the import tool.

This subpackage exposes convenience functions for structured logging,
pre-flight checks and redirect map generation.
"""

from .errors import ERRORS, report_error, report_ok
from .pre_flight_checks import PreFlightCheckError, run_pre_flight_checks
from .redirects import generate_redirects_csv

__all__ = [
    "ERRORS",
    "report_error",
    "report_ok",
    "PreFlightCheckError",
    "run_pre_flight_checks",
    "generate_redirects_csv",
]

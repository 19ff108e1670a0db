"""
Shared utilities for Appointment Scheduler API.

Input validators used by the whitelisted endpoints.
"""

from .validators import (
	validate_date_string,
	validate_datetime_string,
	validate_docname,
	validate_positive_int,
)

__all__ = [
	"validate_date_string",
	"validate_datetime_string",
	"validate_docname",
	"validate_positive_int",
]

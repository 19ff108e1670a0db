# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Scheduling Exceptions

Typed failures raised by the scheduling engine. They derive from Frappe's
exception hierarchy so the request layer answers with the right HTTP
status (417 for validation failures, 404 for missing appointments).
"""

from typing import Iterable, List, Optional

import frappe


class SchedulingError(frappe.ValidationError):
	"""Base class for recoverable scheduling failures."""

	error_type = "invalid"


class AppointmentNotFoundError(SchedulingError, frappe.DoesNotExistError):
	"""The referenced appointment id is not in the collection."""

	error_type = "not_found"

	def __init__(self, appointment_id: str):
		self.appointment_id = appointment_id
		super().__init__(f"Appointment {appointment_id} not found")


class AppointmentConflictError(SchedulingError):
	"""The candidate interval overlaps an active appointment of the same staff."""

	error_type = "conflict"

	def __init__(self, message: str, conflicting_ids: Optional[Iterable[str]] = None):
		self.conflicting_ids: List[str] = list(conflicting_ids or [])
		super().__init__(message)


class InvalidAppointmentError(SchedulingError):
	"""Missing staff, end <= start, unknown type/status and similar input errors."""

	error_type = "invalid"


class InvalidTransitionError(InvalidAppointmentError):
	"""Status or time change requested on a cancelled/completed appointment."""


def error_type_for(exc: Exception) -> str:
	"""Map an exception to the error_type reported to the user layer."""
	return getattr(exc, "error_type", "invalid")

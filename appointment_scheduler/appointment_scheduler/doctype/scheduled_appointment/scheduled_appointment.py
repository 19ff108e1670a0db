# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Scheduled Appointment DocType

Durable copy of the appointments owned by the scheduling engine. The
engine writes through FrappeAppointmentStore; edits made from Desk go
through the same validation, including the per-staff overlap check
against rows already in the database.
"""

from typing import List, Optional

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import get_datetime

from appointment_scheduler.appointment_scheduler.scheduling.exceptions import AppointmentConflictError
from appointment_scheduler.appointment_scheduler.scheduling.factory import DEFAULT_RECURRENCE_PATTERN
from appointment_scheduler.appointment_scheduler.scheduling.models import AppointmentStatus, AppointmentType


def find_overlapping_rows(staff: str, start, end, exclude: Optional[str] = None) -> List[str]:
	"""
	Nombres de appointments activos del staff que se solapan con [start, end).

	Mismo criterio half-open que scheduling/overlap.py: back-to-back no choca.
	"""
	filters = {
		"staff": staff,
		"status": ["!=", AppointmentStatus.CANCELLED.value],
		"start_datetime": ["<", end],
		"end_datetime": [">", start],
	}
	if exclude:
		filters["name"] = ["!=", exclude]

	return frappe.get_all("Scheduled Appointment", filters=filters, pluck="name")


class ScheduledAppointment(Document):
	def validate(self) -> None:
		self._validate_datetime_consistency()
		self._validate_participants()
		self._validate_type_fields()
		self._validate_no_overlap()

	def _validate_datetime_consistency(self) -> None:
		"""Valida que start_datetime < end_datetime."""
		if not self.start_datetime or not self.end_datetime:
			frappe.throw(_("Start DateTime y End DateTime son requeridos"))

		if get_datetime(self.start_datetime) >= get_datetime(self.end_datetime):
			frappe.throw(_("Start DateTime debe ser menor que End DateTime"))

	def _validate_participants(self) -> None:
		if not self.client:
			frappe.throw(_("Client es requerido"))
		if not self.staff:
			frappe.throw(_("Staff es requerido"))

	def _validate_type_fields(self) -> None:
		if self.appointment_type == AppointmentType.RECURRING.value and not self.recurrence_pattern:
			self.recurrence_pattern = DEFAULT_RECURRENCE_PATTERN

	def _validate_no_overlap(self) -> None:
		"""
		Valida que el staff no tenga otra cita activa en el mismo horario.

		Repite en la DocType el check del engine para que ediciones desde
		Desk o escrituras concurrentes no dejen un doble booking.
		"""
		if self.status == AppointmentStatus.CANCELLED.value:
			return

		overlapping = find_overlapping_rows(
			self.staff,
			get_datetime(self.start_datetime),
			get_datetime(self.end_datetime),
			exclude=self.name if not self.is_new() else None
		)

		if overlapping:
			frappe.throw(
				_("El staff {0} ya tiene una cita en ese horario: {1}").format(self.staff, ", ".join(overlapping)),
				AppointmentConflictError
			)

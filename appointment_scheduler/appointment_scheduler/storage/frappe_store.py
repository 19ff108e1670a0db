# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Frappe Appointment Store

Maps engine appointments onto the "Scheduled Appointment" DocType.
Participants are stored as User links; names, emails and phones are
resolved from the User DocType when loading.
"""

import json
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import frappe
from frappe.utils import get_datetime

from appointment_scheduler.appointment_scheduler.scheduling.models import (
	Appointment,
	AppointmentStatus,
	AppointmentType,
	Participant,
	ParticipantRole,
)

from .base import AppointmentStore


APPOINTMENT_DOCTYPE = "Scheduled Appointment"

APPOINTMENT_FIELDS = [
	"name",
	"title",
	"description",
	"start_datetime",
	"end_datetime",
	"client",
	"staff",
	"status",
	"appointment_type",
	"location",
	"notes",
	"group_clients",
	"recurrence_pattern",
	"creation_time",
	"update_time",
]


def resolve_participant(user: Optional[str], role: ParticipantRole) -> Optional[Participant]:
	"""
	Construye un Participant a partir de un User.

	Returns:
		Participant o None si user está vacío o no existe
	"""
	if not user:
		return None

	row = frappe.db.get_value(
		"User", user, ["name", "full_name", "email", "mobile_no"], as_dict=True
	)
	if not row:
		return None

	return Participant(
		id=row.name,
		name=row.full_name or row.name,
		email=row.email or row.name,
		role=role,
		phone=row.mobile_no or None,
	)


def to_doc_values(appointment: Appointment) -> Dict[str, Any]:
	return {
		"title": appointment.title,
		"description": appointment.description,
		"start_datetime": appointment.start_time,
		"end_datetime": appointment.end_time,
		"client": appointment.client.id,
		"staff": appointment.staff_id,
		"status": appointment.status.value,
		"appointment_type": appointment.type.value,
		"location": appointment.location,
		"notes": appointment.notes,
		"group_clients": json.dumps([c.id for c in appointment.clients]) if appointment.clients else None,
		"recurrence_pattern": appointment.recurrence_pattern,
		"creation_time": appointment.created_at,
		"update_time": appointment.updated_at,
	}


class FrappeAppointmentStore(AppointmentStore):
	"""Store sobre la DocType Scheduled Appointment."""

	def __init__(self, doctype: str = APPOINTMENT_DOCTYPE, commit: bool = True):
		self.doctype = doctype
		self.commit = commit

	def upsert(self, appointment: Appointment) -> None:
		values = to_doc_values(appointment)

		if frappe.db.exists(self.doctype, appointment.id):
			doc = frappe.get_doc(self.doctype, appointment.id)
			doc.update(values)
			doc.save(ignore_permissions=True)
		else:
			doc = frappe.get_doc({"doctype": self.doctype, "name": appointment.id, **values})
			doc.insert(ignore_permissions=True, set_name=appointment.id)

		if self.commit:
			frappe.db.commit()

	def fetch_all(self) -> List[Appointment]:
		return self._fetch()

	def fetch_schedule(self, staff_id: Optional[str]) -> List[Appointment]:
		"""
		Filas del staff con SELECT ... FOR UPDATE.

		Una lectura con lock ve la última versión confirmada aunque el
		snapshot de la transacción sea anterior.
		"""
		filters = {"staff": staff_id} if staff_id else {"staff": ["is", "not set"]}
		return self._fetch(filters=filters, for_update=True)

	@contextmanager
	def lock_schedule(self, staff_id: Optional[str]):
		"""
		Bloquea la fila User del staff hasta el commit del upsert
		(o el rollback del request). Funciona entre workers.
		"""
		if staff_id:
			frappe.db.get_value("User", staff_id, "name", for_update=True)
		yield

	def _fetch(self, filters: Optional[Dict[str, Any]] = None, for_update: bool = False) -> List[Appointment]:
		rows = frappe.get_all(
			self.doctype,
			filters=filters or {},
			fields=APPOINTMENT_FIELDS,
			order_by="start_datetime asc",
			for_update=for_update
		)

		appointments = []
		for row in rows:
			appointment = self._from_row(row)
			if appointment:
				appointments.append(appointment)
		return appointments

	def _from_row(self, row: Dict[str, Any]) -> Optional[Appointment]:
		client = resolve_participant(row.get("client"), ParticipantRole.CLIENT)
		if not client:
			frappe.logger("appointment_scheduler").warning(
				f"Skipping {self.doctype} {row.get('name')}: client {row.get('client')} not found"
			)
			return None

		clients = ()
		if row.get("group_clients"):
			resolved = (
				resolve_participant(user, ParticipantRole.CLIENT)
				for user in json.loads(row["group_clients"])
			)
			clients = tuple(p for p in resolved if p)

		return Appointment(
			id=row["name"],
			title=row.get("title") or "",
			description=row.get("description"),
			start_time=get_datetime(row["start_datetime"]),
			end_time=get_datetime(row["end_datetime"]),
			client=client,
			staff=resolve_participant(row.get("staff"), ParticipantRole.STAFF),
			status=AppointmentStatus(row.get("status") or AppointmentStatus.PENDING.value),
			type=AppointmentType(row.get("appointment_type") or AppointmentType.ONE_ON_ONE.value),
			location=row.get("location"),
			notes=row.get("notes"),
			clients=clients,
			recurrence_pattern=row.get("recurrence_pattern"),
			created_at=get_datetime(row["creation_time"]) if row.get("creation_time") else None,
			updated_at=get_datetime(row["update_time"]) if row.get("update_time") else None,
		)

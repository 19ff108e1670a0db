# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Appointment API Endpoints

Whitelisted functions for frontend/external use.

Every request builds its own SchedulingEngine (no global instance):
site settings, the Frappe-backed store, observers registered in the
"appointment_observers" hook, then load_from_store().

Scheduling failures (not found, conflict, invalid input) are returned as
a typed negative result instead of an exception, so the UI can show them
as retryable validation errors:

	{"success": False, "error_type": "conflict", "message": "...", "conflicting_ids": [...]}
"""

from typing import Any, Dict, List, Optional

import frappe
from frappe import _

from appointment_scheduler.appointment_scheduler.scheduling.engine import SchedulingEngine
from appointment_scheduler.appointment_scheduler.scheduling.exceptions import (
	AppointmentConflictError,
	SchedulingError,
	error_type_for,
)
from appointment_scheduler.appointment_scheduler.scheduling.models import Participant, ParticipantRole
from appointment_scheduler.appointment_scheduler.scheduling.settings import get_settings
from appointment_scheduler.appointment_scheduler.storage.frappe_store import (
	FrappeAppointmentStore,
	resolve_participant,
)

from .shared import (
	validate_date_string,
	validate_datetime_string,
	validate_docname,
	validate_positive_int,
)


def build_engine(strategy: Optional[str] = None) -> SchedulingEngine:
	"""
	Construye un engine para el request actual.

	Args:
		strategy: nombre de estrategia; default el de site config

	Returns:
		SchedulingEngine cargado desde el store y con observers suscritos
	"""
	settings = get_settings()
	engine = SchedulingEngine(
		strategy=strategy or settings.default_strategy,
		store=FrappeAppointmentStore(),
		settings=settings,
	)

	for hook_path in frappe.get_hooks("appointment_observers"):
		try:
			observer = frappe.get_attr(hook_path)()
		except Exception:
			frappe.log_error(
				title="Appointment Observer Setup",
				message=f"Error in appointment_observers hook: {hook_path}"
			)
			continue

		if observer is not None:
			engine.subscribe(observer)

	engine.load_from_store()
	return engine


def failure_response(exc: SchedulingError) -> Dict[str, Any]:
	"""Typed negative result for a scheduling failure."""
	response = {
		"success": False,
		"error_type": error_type_for(exc),
		"message": str(exc),
	}
	if isinstance(exc, AppointmentConflictError):
		response["conflicting_ids"] = exc.conflicting_ids
	return response


def _participant(user: str, role: ParticipantRole, field_name: str) -> Participant:
	user = validate_docname(user, field_name)
	participant = resolve_participant(user, role)
	if not participant:
		frappe.throw(_("User '{0}' does not exist").format(user), frappe.DoesNotExistError)
	return participant


@frappe.whitelist(methods=["GET"])
def get_available_slots(
	day: str,
	duration_minutes: int = 30,
	staff: Optional[str] = None,
	strategy: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Obtiene los slots de un día para mostrar en la UI.

	Args:
		day: fecha (YYYY-MM-DD)
		duration_minutes: duración del slot
		staff: User del staff (opcional)
		strategy: "standard" o "prioritized" (opcional)

	Returns:
		dict: {
			"success": True,
			"slots": [
				{"id": "slot-...", "start": "2026-01-15 09:00:00",
				 "end": "2026-01-15 09:30:00", "is_available": True},
				...
			]
		}

	Example:
		```javascript
		frappe.call({
			method: "appointment_scheduler.api.appointment_api.get_available_slots",
			args: {day: "2026-01-20", duration_minutes: 30, staff: "doctor@example.com"},
			callback: function(r) {
				console.log(r.message.slots);
			}
		});
		```
	"""
	day = validate_date_string(day, "day")
	duration_minutes = validate_positive_int(duration_minutes, "duration_minutes")
	staff_participant = _participant(staff, ParticipantRole.STAFF, "staff") if staff else None

	try:
		engine = build_engine(strategy)
		slots = engine.find_slots(day, duration_minutes, staff_participant)
	except SchedulingError as e:
		return failure_response(e)

	return {"success": True, "slots": [slot.as_dict() for slot in slots]}


@frappe.whitelist(methods=["GET"])
def list_appointments(staff: Optional[str] = None, day: Optional[str] = None) -> List[Dict[str, Any]]:
	"""
	Lista appointments, opcionalmente filtrados por staff y/o día.

	Returns:
		list[dict]: appointments serializados, ordenados por inicio
	"""
	if staff:
		staff = validate_docname(staff, "staff")
	if day:
		day = validate_date_string(day, "day")

	engine = build_engine()
	appointments = engine.list_for_day(day) if day else engine.list_all()
	if staff:
		appointments = [a for a in appointments if a.staff_id == staff]

	return [a.as_dict() for a in sorted(appointments, key=lambda a: a.start_time)]


@frappe.whitelist(methods=["POST"])
def create_appointment(
	title: str,
	start_datetime: str,
	end_datetime: str,
	client: str,
	staff: Optional[str] = None,
	appointment_type: str = "one-on-one",
	description: Optional[str] = None,
	location: Optional[str] = None,
	notes: Optional[str] = None,
	recurrence_pattern: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Crea un appointment.

	Args:
		title: título
		start_datetime: inicio (YYYY-MM-DD HH:MM:SS)
		end_datetime: fin (YYYY-MM-DD HH:MM:SS)
		client: User del cliente
		staff: User del staff (requerido por el engine)
		appointment_type: "one-on-one", "group" o "recurring"

	Returns:
		dict: {"success": True, "appointment": {...}} o resultado negativo tipado
	"""
	if not title or not str(title).strip():
		frappe.throw(_("title is required"), frappe.ValidationError)

	start_datetime = validate_datetime_string(start_datetime, "start_datetime")
	end_datetime = validate_datetime_string(end_datetime, "end_datetime")
	client_participant = _participant(client, ParticipantRole.CLIENT, "client")
	staff_participant = _participant(staff, ParticipantRole.STAFF, "staff") if staff else None

	try:
		engine = build_engine()
		appointment = engine.create(
			str(title).strip(),
			start_datetime,
			end_datetime,
			client_participant,
			staff_participant,
			appointment_type=appointment_type,
			recurrence_pattern=recurrence_pattern,
			description=description,
			location=location,
			notes=notes,
		)
	except SchedulingError as e:
		return failure_response(e)

	return {"success": True, "appointment": appointment.as_dict()}


@frappe.whitelist(methods=["POST"])
def update_appointment_status(appointment_id: str, status: str) -> Dict[str, Any]:
	"""Cambia el status de un appointment (pending, scheduled, confirmed, cancelled, completed)."""
	appointment_id = validate_docname(appointment_id, "appointment_id")

	try:
		engine = build_engine()
		appointment = engine.update_status(appointment_id, status)
	except SchedulingError as e:
		return failure_response(e)

	return {"success": True, "appointment": appointment.as_dict()}


@frappe.whitelist(methods=["POST"])
def cancel_appointment(appointment_id: str) -> Dict[str, Any]:
	"""Cancela un appointment. Cancelar dos veces no es un error."""
	appointment_id = validate_docname(appointment_id, "appointment_id")

	try:
		engine = build_engine()
		appointment = engine.cancel(appointment_id)
	except SchedulingError as e:
		return failure_response(e)

	return {"success": True, "appointment": appointment.as_dict()}


@frappe.whitelist(methods=["POST"])
def reschedule_appointment(appointment_id: str, start_datetime: str, end_datetime: str) -> Dict[str, Any]:
	"""
	Mueve un appointment a un nuevo horario.

	Returns:
		dict: {"success": True, "appointment": {...}} o resultado negativo tipado;
		con conflicto el appointment queda sin cambios
	"""
	appointment_id = validate_docname(appointment_id, "appointment_id")
	start_datetime = validate_datetime_string(start_datetime, "start_datetime")
	end_datetime = validate_datetime_string(end_datetime, "end_datetime")

	try:
		engine = build_engine()
		appointment = engine.reschedule(appointment_id, start_datetime, end_datetime)
	except SchedulingError as e:
		return failure_response(e)

	return {"success": True, "appointment": appointment.as_dict()}

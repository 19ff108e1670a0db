# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Google Calendar Adapter

Mirrors appointments as events through the Google Calendar v3 REST API.
"""

from typing import Any, Dict

from frappe.integrations.utils import make_request

from appointment_scheduler.appointment_scheduler.scheduling.models import Appointment, AppointmentStatus

from .base import CalendarSyncAdapter, CalendarSyncError


GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3/calendars"


class GoogleCalendarAdapter(CalendarSyncAdapter):
	"""Adapter para Google Calendar."""

	provider = "google_calendar"

	def _events_url(self) -> str:
		calendar_id = self.settings.get("calendar_id") or "primary"
		return f"{GOOGLE_CALENDAR_API}/{calendar_id}/events"

	def _headers(self) -> Dict[str, str]:
		return {"Authorization": f"Bearer {self.settings.get('access_token')}"}

	def build_event(self, appointment: Appointment) -> Dict[str, Any]:
		"""Cuerpo del evento en formato Google Calendar."""
		attendees = [{"email": appointment.client.email}]
		attendees.extend({"email": c.email} for c in appointment.clients if c.email != appointment.client.email)
		if appointment.staff:
			attendees.append({"email": appointment.staff.email})

		event = {
			"summary": appointment.title,
			"description": appointment.description or "",
			"start": {"dateTime": appointment.start_time.isoformat()},
			"end": {"dateTime": appointment.end_time.isoformat()},
			"attendees": attendees,
			"status": "cancelled" if appointment.status == AppointmentStatus.CANCELLED else "confirmed",
			"extendedProperties": {"private": {"appointment_id": appointment.id}},
		}
		if appointment.location:
			event["location"] = appointment.location

		timezone = self.settings.get("timezone")
		if timezone:
			event["start"]["timeZone"] = timezone
			event["end"]["timeZone"] = timezone

		return event

	def create_event(self, appointment: Appointment) -> str:
		self.validate_settings()
		response = make_request(
			"POST", self._events_url(), headers=self._headers(), json=self.build_event(appointment)
		)
		if not response or not response.get("id"):
			raise CalendarSyncError(f"Google Calendar did not return an event id for {appointment.id}")
		return response["id"]

	def update_event(self, event_id: str, appointment: Appointment) -> bool:
		self.validate_settings()
		make_request(
			"PATCH", f"{self._events_url()}/{event_id}", headers=self._headers(), json=self.build_event(appointment)
		)
		return True

	def delete_event(self, event_id: str) -> bool:
		self.validate_settings()
		make_request("DELETE", f"{self._events_url()}/{event_id}", headers=self._headers())
		return True

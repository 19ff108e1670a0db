# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Microsoft Outlook Adapter

Mirrors appointments as events through the Microsoft Graph API.
"""

from typing import Any, Dict

from frappe.integrations.utils import make_request

from appointment_scheduler.appointment_scheduler.scheduling.models import Appointment

from .base import CalendarSyncAdapter, CalendarSyncError


GRAPH_EVENTS_API = "https://graph.microsoft.com/v1.0/me/events"


class OutlookCalendarAdapter(CalendarSyncAdapter):
	"""Adapter para Microsoft Outlook (Graph)."""

	provider = "microsoft_outlook"

	def _headers(self) -> Dict[str, str]:
		return {"Authorization": f"Bearer {self.settings.get('access_token')}"}

	def build_event(self, appointment: Appointment) -> Dict[str, Any]:
		"""Cuerpo del evento en formato Graph."""
		timezone = self.settings.get("timezone") or "UTC"
		people = [appointment.client, *appointment.clients]
		if appointment.staff:
			people.append(appointment.staff)

		attendees = []
		seen = set()
		for person in people:
			if person.email in seen:
				continue
			seen.add(person.email)
			attendees.append({
				"emailAddress": {"address": person.email, "name": person.name},
				"type": "required",
			})

		return {
			"subject": appointment.title,
			"body": {"contentType": "text", "content": appointment.description or ""},
			"start": {"dateTime": appointment.start_time.strftime("%Y-%m-%dT%H:%M:%S"), "timeZone": timezone},
			"end": {"dateTime": appointment.end_time.strftime("%Y-%m-%dT%H:%M:%S"), "timeZone": timezone},
			"location": {"displayName": appointment.location or ""},
			"attendees": attendees,
			"transactionId": appointment.id,
		}

	def create_event(self, appointment: Appointment) -> str:
		self.validate_settings()
		response = make_request("POST", GRAPH_EVENTS_API, headers=self._headers(), json=self.build_event(appointment))
		if not response or not response.get("id"):
			raise CalendarSyncError(f"Microsoft Graph did not return an event id for {appointment.id}")
		return response["id"]

	def update_event(self, event_id: str, appointment: Appointment) -> bool:
		self.validate_settings()
		payload = self.build_event(appointment)
		# transactionId solo se acepta en la creación
		payload.pop("transactionId")
		make_request("PATCH", f"{GRAPH_EVENTS_API}/{event_id}", headers=self._headers(), json=payload)
		return True

	def delete_event(self, event_id: str) -> bool:
		self.validate_settings()
		make_request("DELETE", f"{GRAPH_EVENTS_API}/{event_id}", headers=self._headers())
		return True

# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Appointment SMS Notifications

Sends a short text to participants that carry a phone number, through
the gateway configured in Frappe's SMS Settings. The gateway call runs
as a background job enqueued after the request commits.
"""

from typing import List

import frappe
from frappe import _

from appointment_scheduler.appointment_scheduler.scheduling.models import Appointment, ChangeKind

from .base import AppointmentObserver


def get_phone_numbers(appointment: Appointment) -> List[str]:
	participants = [appointment.client, *appointment.clients]
	if appointment.staff:
		participants.append(appointment.staff)
	return list(dict.fromkeys(p.phone for p in participants if p.phone))


def build_text(appointment: Appointment, change_kind: ChangeKind) -> str:
	return _("Appointment {0} {1}: {2}").format(
		appointment.title,
		change_kind.value,
		appointment.start_time.strftime("%d/%m %H:%M"),
	)


def send_appointment_sms(numbers: List[str], message: str, appointment_id: str = None) -> None:
	"""
	Background job: envía el SMS por el gateway de SMS Settings.

	Args:
		numbers: teléfonos destino
		message: texto ya construido
		appointment_id: solo para el log
	"""
	from frappe.core.doctype.sms_settings.sms_settings import send_sms

	send_sms(numbers, message)

	frappe.logger("appointment_scheduler").info(
		f"Appointment SMS sent for {appointment_id} to {len(numbers)} number(s)"
	)


class SMSNotificationObserver(AppointmentObserver):
	"""SMS observer backed by frappe.core SMS Settings."""

	def update(self, appointment: Appointment, change_kind: ChangeKind) -> None:
		numbers = get_phone_numbers(appointment)
		if not numbers:
			return

		frappe.enqueue(
			"appointment_scheduler.appointment_scheduler.notifications.sms.send_appointment_sms",
			numbers=numbers,
			message=build_text(appointment, change_kind),
			appointment_id=appointment.id,
			queue="short",
			enqueue_after_commit=True,
		)

# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Appointment Email Notifications

Sends an email to the client and the staff member whenever an
appointment changes. Supports extensibility via hooks:
  - appointment_email_recipients: add extra recipients
"""

from typing import List

import frappe
from frappe import _

from appointment_scheduler.appointment_scheduler.scheduling.models import Appointment, ChangeKind

from .base import AppointmentObserver


SUBJECTS = {
	ChangeKind.CREATED: "[Appointment Created] {0}",
	ChangeKind.UPDATED: "[Appointment Updated] {0}",
	ChangeKind.RESCHEDULED: "[Appointment Rescheduled] {0}",
	ChangeKind.CANCELLED: "[Appointment Cancelled] {0}",
}


def has_outgoing_email() -> bool:
	"""Return True if at least one outgoing Email Account is configured in Frappe."""
	return bool(frappe.db.count("Email Account", {"enable_outgoing": 1}))


def get_recipients(appointment: Appointment) -> List[str]:
	"""Client, group clients and staff emails plus hook-provided recipients, deduplicated."""
	recipients = [appointment.client.email]
	recipients.extend(c.email for c in appointment.clients)
	if appointment.staff:
		recipients.append(appointment.staff.email)

	for hook_path in frappe.get_hooks("appointment_email_recipients"):
		try:
			extra = frappe.get_attr(hook_path)(appointment)
			if extra:
				recipients.extend(extra)
		except Exception:
			frappe.log_error(
				title="Appointment Notification",
				message=f"Error in appointment_email_recipients hook: {hook_path}"
			)

	# Deduplicar preservando orden
	seen = set()
	unique = []
	for r in recipients:
		if r and r not in seen:
			seen.add(r)
			unique.append(r)
	return unique


def build_message(appointment: Appointment, change_kind: ChangeKind) -> str:
	staff_name = appointment.staff.name if appointment.staff else _("Unassigned")
	lines = [
		_("Appointment: {0}").format(appointment.title),
		_("Status: {0}").format(appointment.status.value),
		_("When: {0} - {1}").format(
			appointment.start_time.strftime("%A %d %B %Y, %H:%M"),
			appointment.end_time.strftime("%H:%M"),
		),
		_("With: {0}").format(staff_name),
	]
	if appointment.location:
		lines.append(_("Location: {0}").format(appointment.location))
	if change_kind == ChangeKind.CANCELLED:
		lines.append(_("This appointment has been cancelled."))
	return "<br>".join(lines)


class EmailNotificationObserver(AppointmentObserver):
	"""Email observer. Sends are queued by frappe.sendmail."""

	def update(self, appointment: Appointment, change_kind: ChangeKind) -> None:
		if not has_outgoing_email():
			frappe.logger("appointment_scheduler").warning(
				f"Email notification skipped for {appointment.id}: "
				"no outgoing Email Account configured in Frappe."
			)
			return

		recipients = get_recipients(appointment)
		if not recipients:
			frappe.logger("appointment_scheduler").info(
				f"No notification recipients for appointment {appointment.id}, skipping email."
			)
			return

		frappe.sendmail(
			recipients=recipients,
			subject=_(SUBJECTS[change_kind]).format(appointment.title),
			message=build_message(appointment, change_kind),
			reference_doctype="Scheduled Appointment",
			reference_name=appointment.id,
		)

		frappe.logger("appointment_scheduler").info(
			f"Appointment {change_kind.value} email queued for {appointment.id} to {recipients}"
		)

# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Appointment API Validators

Checks the raw arguments of the whitelisted endpoints before they reach
the engine. Every failure is a frappe.ValidationError raised through
frappe.throw.
"""

import re
from datetime import datetime

import frappe
from frappe import _


DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
DATETIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")

# User ids (email o "Administrator") y appointment ids (appt-<hex>)
DOCNAME_PATTERN = re.compile(r"^[A-Za-z0-9@._+-]+$")
MAX_DOCNAME_LENGTH = 140


def _matches(value: str, pattern, fmt: str) -> bool:
	# El regex fija el formato; strptime rechaza fechas inexistentes (2024-02-30)
	if not pattern.match(value):
		return False
	try:
		datetime.strptime(value, fmt)
	except ValueError:
		return False
	return True


def _required(value, field_name: str) -> str:
	if value is None or not str(value).strip():
		frappe.throw(_("{0} is required").format(field_name), frappe.ValidationError)
	return str(value).strip()


def validate_date_string(date_str: str, field_name: str = "date") -> str:
	"""
	Valida una fecha YYYY-MM-DD que además exista en el calendario.

	Returns:
		str: la fecha sin espacios
	"""
	date_str = _required(date_str, field_name)

	if not _matches(date_str, DATE_PATTERN, "%Y-%m-%d"):
		frappe.throw(_("Invalid {0}. Use YYYY-MM-DD").format(field_name), frappe.ValidationError)

	return date_str


def validate_datetime_string(datetime_str: str, field_name: str = "datetime") -> str:
	"""Valida un datetime YYYY-MM-DD HH:MM:SS parseable."""
	datetime_str = _required(datetime_str, field_name)

	if not _matches(datetime_str, DATETIME_PATTERN, "%Y-%m-%d %H:%M:%S"):
		frappe.throw(
			_("Invalid {0}. Use YYYY-MM-DD HH:MM:SS").format(field_name), frappe.ValidationError
		)

	return datetime_str


def validate_docname(name: str, field_name: str = "name") -> str:
	"""
	Valida un id de User o de appointment.

	Solo letras, dígitos y @ . _ + -; hasta 140 caracteres (largo de name
	en Frappe).
	"""
	name = _required(name, field_name)

	if len(name) > MAX_DOCNAME_LENGTH or not DOCNAME_PATTERN.match(name):
		frappe.throw(_("Invalid {0}").format(field_name), frappe.ValidationError)

	return name


def validate_positive_int(value, field_name: str = "value", maximum: int = 24 * 60) -> int:
	"""Validate an integer in [1, maximum] (durations in minutes)."""
	try:
		number = int(value)
	except (TypeError, ValueError):
		frappe.throw(_("{0} must be an integer").format(field_name), frappe.ValidationError)

	if number <= 0 or number > maximum:
		frappe.throw(
			_("{0} must be between 1 and {1}").format(field_name, maximum), frappe.ValidationError
		)

	return number

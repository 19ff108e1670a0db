"""
Tests for api/shared/validators.py
"""

import unittest
from unittest.mock import patch

import frappe

from appointment_scheduler.api.shared import (
	validate_date_string,
	validate_datetime_string,
	validate_docname,
	validate_positive_int,
)


VALIDATORS_MODULE = "appointment_scheduler.api.shared.validators"


def fake_throw(msg, exc=frappe.ValidationError, *args, **kwargs):
	raise exc(msg)


class TestValidators(unittest.TestCase):
	"""Tests for the API input validators."""

	def setUp(self):
		for target, kwargs in [
			("frappe.throw", {"side_effect": fake_throw}),
			(f"{VALIDATORS_MODULE}._", {"side_effect": lambda message: message}),
		]:
			patcher = patch(target, **kwargs)
			patcher.start()
			self.addCleanup(patcher.stop)

	def test_docname_accepts_user_and_appointment_ids(self):
		for name in ["doctor@example.com", "first.last+tag@clinic.co", "Administrator", "appt-3f2a9c0d1e"]:
			self.assertEqual(validate_docname(name, "staff"), name)

		self.assertEqual(validate_docname("  appt-3f2a  ", "appointment_id"), "appt-3f2a")

	def test_docname_rejects_other_characters(self):
		for name in ["appt-1; DROP TABLE", "<script>", "a b", "appt'1", "x" * 141, "", None]:
			with self.assertRaises(frappe.ValidationError):
				validate_docname(name, "appointment_id")

	def test_date_string(self):
		self.assertEqual(validate_date_string(" 2024-01-08 ", "day"), "2024-01-08")

		for value in ["08/01/2024", "2024-1-8", "2024-02-30", ""]:
			with self.assertRaises(frappe.ValidationError):
				validate_date_string(value, "day")

	def test_datetime_string(self):
		self.assertEqual(validate_datetime_string("2024-01-08 10:00:00"), "2024-01-08 10:00:00")

		for value in ["2024-01-08 10:00", "2024-01-08T10:00:00", "2024-01-08 25:00:00", None]:
			with self.assertRaises(frappe.ValidationError):
				validate_datetime_string(value, "start_datetime")

	def test_positive_int(self):
		self.assertEqual(validate_positive_int("45", "duration_minutes"), 45)

		for value in [0, -30, "abc", None, 24 * 60 + 1]:
			with self.assertRaises(frappe.ValidationError):
				validate_positive_int(value, "duration_minutes")

"""
Tests for storage/base.py and storage/frappe_store.py
"""

import json
import threading
import unittest
from datetime import datetime
from unittest.mock import patch

import frappe

from appointment_scheduler.appointment_scheduler.scheduling.models import (
	Appointment,
	AppointmentStatus,
	AppointmentType,
	Participant,
	ParticipantRole,
)
from appointment_scheduler.appointment_scheduler.storage.base import InMemoryAppointmentStore
from appointment_scheduler.appointment_scheduler.storage.frappe_store import (
	APPOINTMENT_DOCTYPE,
	FrappeAppointmentStore,
	resolve_participant,
	to_doc_values,
)


CLIENT = Participant("client@example.com", "Client", "client@example.com")
CLIENT_2 = Participant("client2@example.com", "Client 2", "client2@example.com")
STAFF = Participant("staff@example.com", "Staff", "staff@example.com", ParticipantRole.STAFF)

USERS = {
	"client@example.com": frappe._dict(
		name="client@example.com", full_name="Client", email="client@example.com", mobile_no="+573001112233"
	),
	"client2@example.com": frappe._dict(
		name="client2@example.com", full_name="Client 2", email="client2@example.com", mobile_no=None
	),
	"staff@example.com": frappe._dict(
		name="staff@example.com", full_name="Staff", email="staff@example.com", mobile_no=None
	),
}


def get_user(doctype, name, fields, as_dict=False, **kwargs):
	return USERS.get(name)


def make_appointment(**kwargs):
	values = dict(
		id="appt-1",
		title="Kickoff",
		start_time=datetime(2024, 1, 8, 10),
		end_time=datetime(2024, 1, 8, 11),
		client=CLIENT,
		staff=STAFF,
	)
	values.update(kwargs)
	return Appointment(**values)


class TestInMemoryStore(unittest.TestCase):
	"""Tests for InMemoryAppointmentStore."""

	def test_upsert_replaces_by_id(self):
		store = InMemoryAppointmentStore()
		store.upsert(make_appointment())
		store.upsert(make_appointment(status=AppointmentStatus.CONFIRMED))

		stored = store.fetch_all()
		self.assertEqual(len(stored), 1)
		self.assertEqual(stored[0].status, AppointmentStatus.CONFIRMED)

	def test_initial_appointments(self):
		store = InMemoryAppointmentStore([make_appointment(), make_appointment(id="appt-2")])
		self.assertEqual([a.id for a in store.fetch_all()], ["appt-1", "appt-2"])


class TestFrappeStore(unittest.TestCase):
	"""Tests for FrappeAppointmentStore with the Frappe API mocked."""

	def setUp(self):
		db_patcher = patch("frappe.db")
		self.mock_db = db_patcher.start()
		self.addCleanup(db_patcher.stop)
		self.mock_db.get_value.side_effect = get_user

		logger_patcher = patch("frappe.logger")
		self.mock_logger = logger_patcher.start()
		self.addCleanup(logger_patcher.stop)

	def test_resolve_participant(self):
		participant = resolve_participant("client@example.com", ParticipantRole.CLIENT)

		self.assertEqual(participant.id, "client@example.com")
		self.assertEqual(participant.phone, "+573001112233")
		self.assertEqual(participant.role, ParticipantRole.CLIENT)

	def test_resolve_missing_participant(self):
		self.assertIsNone(resolve_participant("ghost@example.com", ParticipantRole.STAFF))
		self.assertIsNone(resolve_participant(None, ParticipantRole.STAFF))

	def test_to_doc_values(self):
		appointment = make_appointment(type=AppointmentType.GROUP, clients=(CLIENT, CLIENT_2))
		values = to_doc_values(appointment)

		self.assertEqual(values["client"], "client@example.com")
		self.assertEqual(values["staff"], "staff@example.com")
		self.assertEqual(values["status"], "pending")
		self.assertEqual(values["appointment_type"], "group")
		self.assertEqual(json.loads(values["group_clients"]), ["client@example.com", "client2@example.com"])

	@patch("frappe.get_doc")
	def test_upsert_inserts_new(self, mock_get_doc):
		self.mock_db.exists.return_value = None

		FrappeAppointmentStore().upsert(make_appointment())

		payload = mock_get_doc.call_args.args[0]
		self.assertEqual(payload["doctype"], APPOINTMENT_DOCTYPE)
		self.assertEqual(payload["name"], "appt-1")
		mock_get_doc.return_value.insert.assert_called_once_with(ignore_permissions=True, set_name="appt-1")
		self.mock_db.commit.assert_called_once()

	@patch("frappe.get_doc")
	def test_upsert_updates_existing(self, mock_get_doc):
		self.mock_db.exists.return_value = "appt-1"

		FrappeAppointmentStore(commit=False).upsert(make_appointment(status=AppointmentStatus.CANCELLED))

		mock_get_doc.assert_called_once_with(APPOINTMENT_DOCTYPE, "appt-1")
		doc = mock_get_doc.return_value
		self.assertEqual(doc.update.call_args.args[0]["status"], "cancelled")
		doc.save.assert_called_once_with(ignore_permissions=True)
		self.mock_db.commit.assert_not_called()

	@patch("frappe.get_all")
	def test_fetch_all(self, mock_get_all):
		mock_get_all.return_value = [
			frappe._dict(
				name="appt-1",
				title="Kickoff",
				start_datetime="2024-01-08 10:00:00",
				end_datetime="2024-01-08 11:00:00",
				client="client@example.com",
				staff="staff@example.com",
				status="confirmed",
				appointment_type="group",
				group_clients=json.dumps(["client@example.com", "client2@example.com"]),
				creation_time="2024-01-01 08:00:00",
			),
			frappe._dict(
				name="appt-2",
				title="Orphan",
				start_datetime="2024-01-08 12:00:00",
				end_datetime="2024-01-08 13:00:00",
				client="ghost@example.com",
				staff="staff@example.com",
				status="pending",
			),
		]

		appointments = FrappeAppointmentStore().fetch_all()

		self.assertEqual(len(appointments), 1)
		appointment = appointments[0]
		self.assertEqual(appointment.start_time, datetime(2024, 1, 8, 10))
		self.assertEqual(appointment.status, AppointmentStatus.CONFIRMED)
		self.assertEqual(appointment.type, AppointmentType.GROUP)
		self.assertEqual([c.id for c in appointment.clients], ["client@example.com", "client2@example.com"])
		self.assertEqual(appointment.staff.role, ParticipantRole.STAFF)
		self.assertEqual(appointment.created_at, datetime(2024, 1, 1, 8))
		self.assertIsNone(appointment.updated_at)
		self.mock_logger.return_value.warning.assert_called_once()

	@patch("frappe.get_all", return_value=[])
	def test_fetch_schedule_locks_rows(self, mock_get_all):
		FrappeAppointmentStore().fetch_schedule("staff@example.com")

		kwargs = mock_get_all.call_args.kwargs
		self.assertEqual(kwargs["filters"], {"staff": "staff@example.com"})
		self.assertTrue(kwargs["for_update"])

	def test_lock_schedule_locks_staff_user(self):
		with FrappeAppointmentStore().lock_schedule("staff@example.com"):
			self.mock_db.get_value.assert_called_once_with("User", "staff@example.com", "name", for_update=True)

		self.mock_db.commit.assert_not_called()

	def test_lock_schedule_without_staff(self):
		with FrappeAppointmentStore().lock_schedule(None):
			pass

		self.mock_db.get_value.assert_not_called()


class TestInMemoryScheduleLock(unittest.TestCase):
	"""Tests for InMemoryAppointmentStore.lock_schedule and fetch_schedule."""

	def test_fetch_schedule_filters_staff(self):
		other = Participant("other@example.com", "Other", "other@example.com", ParticipantRole.STAFF)
		store = InMemoryAppointmentStore([make_appointment(), make_appointment(id="appt-2", staff=other)])

		self.assertEqual([a.id for a in store.fetch_schedule("staff@example.com")], ["appt-1"])

	def test_lock_schedule_excludes_other_threads(self):
		store = InMemoryAppointmentStore()
		acquired = []

		def contender():
			with store.lock_schedule("staff@example.com"):
				acquired.append(True)

		with store.lock_schedule("staff@example.com"):
			thread = threading.Thread(target=contender)
			thread.start()
			thread.join(timeout=0.2)
			self.assertEqual(acquired, [])

		thread.join()
		self.assertEqual(acquired, [True])

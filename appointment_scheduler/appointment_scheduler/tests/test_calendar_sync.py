"""
Tests for notifications/calendar_sync

Tests the provider adapters (HTTP mocked), the adapter factory and the
calendar sync observer.
"""

import unittest
from datetime import datetime
from unittest.mock import MagicMock, patch

from appointment_scheduler.appointment_scheduler.notifications.calendar_sync.base import (
	CalendarSyncAdapter,
	CalendarSyncError,
)
from appointment_scheduler.appointment_scheduler.notifications.calendar_sync.factory import get_adapter
from appointment_scheduler.appointment_scheduler.notifications.calendar_sync.google_calendar import (
	GoogleCalendarAdapter,
)
from appointment_scheduler.appointment_scheduler.notifications.calendar_sync.microsoft_outlook import (
	OutlookCalendarAdapter,
)
from appointment_scheduler.appointment_scheduler.notifications.calendar_sync.observer import (
	CachedEventIds,
	CalendarSyncObserver,
	from_site_config,
	run_calendar_sync,
)
from appointment_scheduler.appointment_scheduler.scheduling.models import (
	Appointment,
	AppointmentStatus,
	ChangeKind,
	Participant,
	ParticipantRole,
)


CALENDAR_SYNC = "appointment_scheduler.appointment_scheduler.notifications.calendar_sync"

APPOINTMENT = Appointment(
	id="appt-1",
	title="Kickoff",
	start_time=datetime(2024, 1, 8, 10),
	end_time=datetime(2024, 1, 8, 11),
	client=Participant("client@example.com", "Client", "client@example.com"),
	staff=Participant("staff@example.com", "Staff", "staff@example.com", ParticipantRole.STAFF),
	location="Room 1",
)


class TestAdapterFactory(unittest.TestCase):
	"""Tests for get_adapter."""

	def test_known_providers(self):
		self.assertIsInstance(get_adapter("google_calendar"), GoogleCalendarAdapter)
		self.assertIsInstance(get_adapter("microsoft_outlook"), OutlookCalendarAdapter)

	def test_unknown_provider(self):
		with self.assertRaises(ValueError):
			get_adapter("zoom")

	def test_access_token_required(self):
		with self.assertRaises(CalendarSyncError):
			GoogleCalendarAdapter({}).create_event(APPOINTMENT)


class TestGoogleCalendarAdapter(unittest.TestCase):
	"""Tests for GoogleCalendarAdapter."""

	def setUp(self):
		self.adapter = GoogleCalendarAdapter({"access_token": "token", "calendar_id": "team"})

	def test_build_event(self):
		event = self.adapter.build_event(APPOINTMENT)

		self.assertEqual(event["summary"], "Kickoff")
		self.assertEqual(event["start"]["dateTime"], "2024-01-08T10:00:00")
		self.assertEqual(event["status"], "confirmed")
		self.assertEqual(event["location"], "Room 1")
		self.assertEqual(
			[a["email"] for a in event["attendees"]],
			["client@example.com", "staff@example.com"]
		)

	@patch(f"{CALENDAR_SYNC}.google_calendar.make_request")
	def test_create_event(self, mock_request):
		mock_request.return_value = {"id": "evt-1"}

		self.assertEqual(self.adapter.create_event(APPOINTMENT), "evt-1")

		method, url = mock_request.call_args.args
		self.assertEqual(method, "POST")
		self.assertEqual(url, "https://www.googleapis.com/calendar/v3/calendars/team/events")
		self.assertEqual(mock_request.call_args.kwargs["headers"]["Authorization"], "Bearer token")

	@patch(f"{CALENDAR_SYNC}.google_calendar.make_request")
	def test_create_event_without_id(self, mock_request):
		mock_request.return_value = {}

		with self.assertRaises(CalendarSyncError):
			self.adapter.create_event(APPOINTMENT)

	@patch(f"{CALENDAR_SYNC}.google_calendar.make_request")
	def test_update_and_delete(self, mock_request):
		self.adapter.update_event("evt-1", APPOINTMENT)
		self.adapter.delete_event("evt-1")

		calls = [c.args for c in mock_request.call_args_list]
		self.assertEqual(calls[0], ("PATCH", "https://www.googleapis.com/calendar/v3/calendars/team/events/evt-1"))
		self.assertEqual(calls[1], ("DELETE", "https://www.googleapis.com/calendar/v3/calendars/team/events/evt-1"))


class TestOutlookCalendarAdapter(unittest.TestCase):
	"""Tests for OutlookCalendarAdapter."""

	def setUp(self):
		self.adapter = OutlookCalendarAdapter({"access_token": "token", "timezone": "America/Bogota"})

	def test_build_event(self):
		event = self.adapter.build_event(APPOINTMENT)

		self.assertEqual(event["subject"], "Kickoff")
		self.assertEqual(event["start"], {"dateTime": "2024-01-08T10:00:00", "timeZone": "America/Bogota"})
		self.assertEqual(event["transactionId"], "appt-1")
		self.assertEqual(len(event["attendees"]), 2)

	@patch(f"{CALENDAR_SYNC}.microsoft_outlook.make_request")
	def test_update_drops_transaction_id(self, mock_request):
		self.adapter.update_event("evt-9", APPOINTMENT)

		method, url = mock_request.call_args.args
		self.assertEqual(method, "PATCH")
		self.assertTrue(url.endswith("/me/events/evt-9"))
		self.assertNotIn("transactionId", mock_request.call_args.kwargs["json"])


class TestCalendarSyncObserver(unittest.TestCase):
	"""Tests for CalendarSyncObserver."""

	def setUp(self):
		patcher = patch("frappe.logger")
		patcher.start()
		self.addCleanup(patcher.stop)

		self.adapter = MagicMock(spec=CalendarSyncAdapter)
		self.adapter.provider = "fake"
		self.adapter.create_event.return_value = "evt-1"
		self.observer = CalendarSyncObserver(self.adapter)

	def test_lifecycle(self):
		self.observer.update(APPOINTMENT, ChangeKind.CREATED)
		self.observer.update(APPOINTMENT, ChangeKind.RESCHEDULED)
		self.observer.update(APPOINTMENT, ChangeKind.CANCELLED)

		self.adapter.create_event.assert_called_once_with(APPOINTMENT)
		self.adapter.update_event.assert_called_once_with("evt-1", APPOINTMENT)
		self.adapter.delete_event.assert_called_once_with("evt-1")
		self.assertEqual(self.observer.event_ids, {})

	def test_unknown_event_is_created_on_update(self):
		self.observer.update(APPOINTMENT, ChangeKind.UPDATED)

		self.adapter.create_event.assert_called_once()
		self.assertEqual(self.observer.event_ids["appt-1"], "evt-1")

	def test_cancel_unknown_event_is_noop(self):
		cancelled = Appointment(
			id="appt-2",
			title="Gone",
			start_time=APPOINTMENT.start_time,
			end_time=APPOINTMENT.end_time,
			client=APPOINTMENT.client,
			staff=APPOINTMENT.staff,
			status=AppointmentStatus.CANCELLED,
		)
		self.observer.update(cancelled, ChangeKind.CANCELLED)

		self.adapter.delete_event.assert_not_called()
		self.adapter.create_event.assert_not_called()

	@patch("frappe.cache")
	def test_cached_event_ids(self, mock_cache):
		event_ids = CachedEventIds("google_calendar")
		mock_cache.get_value.return_value = "evt-7"

		event_ids["appt-1"] = "evt-7"
		self.assertEqual(event_ids.get("appt-1"), "evt-7")
		del event_ids["appt-1"]

		key = "appointment_scheduler:calendar_event:google_calendar:appt-1"
		mock_cache.set_value.assert_called_once_with(key, "evt-7")
		mock_cache.delete_value.assert_called_once_with(key)

	@patch("frappe.conf", {})
	def test_from_site_config_disabled(self):
		self.assertIsNone(from_site_config())

	@patch("frappe.conf", {"appointment_calendar_sync": {"provider": "google_calendar", "access_token": "token"}})
	def test_from_site_config(self):
		observer = from_site_config()

		self.assertIsInstance(observer.adapter, GoogleCalendarAdapter)
		self.assertEqual(observer.adapter.settings, {"access_token": "token"})
		self.assertIsInstance(observer.event_ids, CachedEventIds)
		self.assertTrue(observer.enqueue)

	@patch("frappe.conf", {"appointment_calendar_sync": {"provider": "google_calendar"}})
	def test_from_site_config_without_token(self):
		with self.assertRaises(CalendarSyncError):
			from_site_config()


class TestCalendarSyncJob(unittest.TestCase):
	"""Tests for the enqueued calendar sync."""

	def setUp(self):
		patcher = patch("frappe.logger")
		patcher.start()
		self.addCleanup(patcher.stop)

		self.adapter = MagicMock(spec=CalendarSyncAdapter)
		self.adapter.provider = "fake"
		self.adapter.create_event.return_value = "evt-1"

	@patch("frappe.enqueue")
	def test_update_enqueues_after_commit(self, mock_enqueue):
		observer = CalendarSyncObserver(self.adapter, enqueue=True)

		observer.update(APPOINTMENT, ChangeKind.RESCHEDULED)

		self.adapter.create_event.assert_not_called()
		self.adapter.update_event.assert_not_called()
		self.assertEqual(mock_enqueue.call_args.args[0], f"{CALENDAR_SYNC}.observer.run_calendar_sync")
		kwargs = mock_enqueue.call_args.kwargs
		self.assertTrue(kwargs["enqueue_after_commit"])
		self.assertEqual(kwargs["appointment"], APPOINTMENT)
		self.assertEqual(kwargs["change_kind"], "rescheduled")

	@patch(f"{CALENDAR_SYNC}.observer.from_site_config")
	def test_job_syncs_with_site_observer(self, mock_from_site_config):
		observer = CalendarSyncObserver(self.adapter)
		mock_from_site_config.return_value = observer

		run_calendar_sync(APPOINTMENT, "created")

		mock_from_site_config.assert_called_once_with(enqueue=False)
		self.adapter.create_event.assert_called_once_with(APPOINTMENT)
		self.assertEqual(observer.event_ids, {"appt-1": "evt-1"})

	@patch("frappe.conf", {})
	def test_job_without_config_is_noop(self):
		run_calendar_sync(APPOINTMENT, "created")

		self.adapter.create_event.assert_not_called()

# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Calendar Sync Observer

Keeps an external calendar in step with the engine:
- created -> create_event
- updated / rescheduled -> update_event
- cancelled -> delete_event

With enqueue=True (the hook default) update only enqueues run_calendar_sync
after commit; the provider HTTP calls run in the background job.

A site enables it in site_config.json:

	{
		"appointment_calendar_sync": {
			"provider": "google_calendar",
			"access_token": "...",
			"calendar_id": "primary"
		}
	}
"""

import threading
from typing import Any, Dict, Optional

import frappe

from appointment_scheduler.appointment_scheduler.scheduling.models import Appointment, ChangeKind

from ..base import AppointmentObserver
from .base import CalendarSyncAdapter
from .factory import get_adapter


CONF_KEY = "appointment_calendar_sync"


class CachedEventIds:
	"""
	appointment id -> event id, guardado en frappe.cache.

	El engine se construye por request, así que el mapeo no puede vivir
	solo en memoria del observer.
	"""

	def __init__(self, provider: str):
		self.provider = provider

	def _key(self, appointment_id: str) -> str:
		return f"appointment_scheduler:calendar_event:{self.provider}:{appointment_id}"

	def get(self, appointment_id: str, default: Optional[str] = None) -> Optional[str]:
		return frappe.cache.get_value(self._key(appointment_id)) or default

	def __setitem__(self, appointment_id: str, event_id: str) -> None:
		frappe.cache.set_value(self._key(appointment_id), event_id)

	def __delitem__(self, appointment_id: str) -> None:
		frappe.cache.delete_value(self._key(appointment_id))


class CalendarSyncObserver(AppointmentObserver):
	"""Observer que delega en un CalendarSyncAdapter."""

	def __init__(self, adapter: CalendarSyncAdapter, event_ids=None, enqueue: bool = False):
		self.adapter = adapter
		self.enqueue = enqueue
		# appointment id -> event id en el proveedor (dict o CachedEventIds)
		self.event_ids = event_ids if event_ids is not None else {}
		self._lock = threading.Lock()

	@classmethod
	def for_provider(cls, provider: str, settings: Optional[Dict[str, Any]] = None) -> "CalendarSyncObserver":
		return cls(get_adapter(provider, settings))

	def update(self, appointment: Appointment, change_kind: ChangeKind) -> None:
		if not self.enqueue:
			self.sync(appointment, change_kind)
			return

		frappe.enqueue(
			"appointment_scheduler.appointment_scheduler.notifications.calendar_sync.observer.run_calendar_sync",
			appointment=appointment,
			change_kind=change_kind.value,
			queue="default",
			enqueue_after_commit=True,
		)

	def sync(self, appointment: Appointment, change_kind: ChangeKind) -> None:
		"""Aplica el cambio en el calendario del proveedor."""
		with self._lock:
			event_id = self.event_ids.get(appointment.id)

			if change_kind == ChangeKind.CANCELLED:
				if event_id:
					self.adapter.delete_event(event_id)
					del self.event_ids[appointment.id]
				return

			if change_kind == ChangeKind.CREATED or not event_id:
				# Eventos desconocidos (por ejemplo cargados desde el store) se crean
				self.event_ids[appointment.id] = self.adapter.create_event(appointment)
			else:
				self.adapter.update_event(event_id, appointment)

		frappe.logger("appointment_scheduler").info(
			f"Calendar {self.adapter.provider} synced: appointment {appointment.id} {change_kind.value}"
		)


def from_site_config(enqueue: bool = True) -> Optional[CalendarSyncObserver]:
	"""
	Factory registrada en el hook appointment_observers.

	Args:
		enqueue: True para diferir el sync a un background job

	Returns:
		CalendarSyncObserver, o None si el sitio no tiene sync configurado
	"""
	conf = frappe.conf.get(CONF_KEY)
	if not conf or not conf.get("provider"):
		return None

	settings = {key: value for key, value in conf.items() if key != "provider"}
	adapter = get_adapter(conf["provider"], settings)
	adapter.validate_settings()
	return CalendarSyncObserver(adapter, event_ids=CachedEventIds(adapter.provider), enqueue=enqueue)


def run_calendar_sync(appointment: Appointment, change_kind: str) -> None:
	"""
	Background job encolado por CalendarSyncObserver.update.

	Reconstruye el observer desde site config; si el sync se desactivó
	entre el enqueue y la ejecución no hace nada.
	"""
	observer = from_site_config(enqueue=False)
	if observer is None:
		return

	observer.sync(appointment, ChangeKind(change_kind))

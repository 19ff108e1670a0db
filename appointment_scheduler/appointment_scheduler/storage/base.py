# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Appointment Store Interface

Durable storage is outside the engine; the engine needs upsert, fetch_all
and a per-staff exclusion boundary (lock_schedule) so that engines in
different workers never commit overlapping appointments.
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional

from appointment_scheduler.appointment_scheduler.scheduling.models import Appointment


class AppointmentStore(ABC):
	"""Interfaz base para stores de appointments."""

	@abstractmethod
	def upsert(self, appointment: Appointment) -> None:
		"""Inserta o reemplaza el appointment por id."""
		pass

	@abstractmethod
	def fetch_all(self) -> List[Appointment]:
		"""Retorna todos los appointments guardados."""
		pass

	def fetch_schedule(self, staff_id: Optional[str]) -> List[Appointment]:
		"""
		Appointments de un staff, leídos con lock_schedule tomado.

		Debe ver lo último que otros engines hayan escrito.
		"""
		return [a for a in self.fetch_all() if a.staff_id == staff_id]

	@abstractmethod
	def lock_schedule(self, staff_id: Optional[str]):
		"""
		Context manager de exclusión sobre la agenda de un staff.

		Mientras está tomado ningún otro engine (de este u otro worker)
		puede leer-verificar-escribir appointments de ese staff. Debe
		cubrir el upsert del commit.
		"""
		pass


class InMemoryAppointmentStore(AppointmentStore):
	"""Dict-backed store, insertion ordered. Shared by every engine built on it."""

	def __init__(self, appointments: Iterable[Appointment] = ()):
		self._lock = threading.Lock()
		self._schedule_lock = threading.RLock()
		self._appointments: Dict[str, Appointment] = {a.id: a for a in appointments}

	def upsert(self, appointment: Appointment) -> None:
		with self._lock:
			self._appointments[appointment.id] = appointment

	def fetch_all(self) -> List[Appointment]:
		with self._lock:
			return list(self._appointments.values())

	@contextmanager
	def lock_schedule(self, staff_id: Optional[str]):
		# Un solo lock para todos los staff
		with self._schedule_lock:
			yield

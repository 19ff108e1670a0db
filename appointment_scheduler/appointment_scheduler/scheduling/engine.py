# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Scheduling Engine

Owns the in-memory appointment collection and coordinates the other
scheduling services (mediator):
- builds candidates through the AppointmentFactory
- checks conflicts through the active SchedulingStrategy
- commits or rejects each mutation
- fans out committed changes through the AppointmentDispatcher
- optionally syncs committed changes to an AppointmentStore

Flujo de una mutación:
1. Tomar la agenda del staff en el store (lock_schedule) y refrescarla,
   así engines de otros workers no pueden reservar el mismo horario
2. Bajo el lock del engine: validar, verificar conflictos con la
   estrategia activa y hacer commit en la colección
3. Sync con el store, todavía dentro de lock_schedule. Un error se
   registra sin rollback, salvo AppointmentConflictError de la DocType,
   que deshace el commit en memoria y se propaga
4. Fuera de todo lock: dispatch a los observers
"""

import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Callable, Iterable, List, Optional, Sequence, Union

import frappe
from frappe.utils import get_datetime, getdate, now_datetime

from appointment_scheduler.appointment_scheduler.notifications.base import AppointmentObserver
from appointment_scheduler.appointment_scheduler.notifications.dispatcher import AppointmentDispatcher
from appointment_scheduler.appointment_scheduler.storage.base import AppointmentStore

from .exceptions import (
	AppointmentConflictError,
	AppointmentNotFoundError,
	InvalidAppointmentError,
	InvalidTransitionError,
)
from .factory import AppointmentFactory
from .models import (
	ALLOWED_TRANSITIONS,
	Appointment,
	AppointmentStatus,
	AppointmentType,
	ChangeKind,
	Participant,
	TimeSlot,
)
from .settings import SchedulingSettings
from .strategies import SchedulingStrategy, get_strategy


DateTimeLike = Union[datetime, str]

# Campos opcionales que create acepta en **extra
EXTRA_FIELDS = frozenset({"description", "location", "notes", "appointment_id"})


def _logger():
	return frappe.logger("appointment_scheduler")


class SchedulingEngine:
	"""
	Engine de agendamiento.

	No hay instancia global: cada caller construye su engine y es dueño de
	su ciclo de vida. La colección en memoria se protege con un RLock que
	nunca se mantiene durante I/O; la exclusión entre engines la da el
	store (lock_schedule).
	"""

	def __init__(
		self,
		strategy: Optional[Union[SchedulingStrategy, str]] = None,
		store: Optional[AppointmentStore] = None,
		dispatcher: Optional[AppointmentDispatcher] = None,
		settings: Optional[SchedulingSettings] = None,
		clock: Optional[Callable[[], datetime]] = None,
		factory: Optional[AppointmentFactory] = None
	):
		self.settings = settings or SchedulingSettings()
		self.store = store
		self.dispatcher = dispatcher or AppointmentDispatcher()
		self.factory = factory or AppointmentFactory()
		self._clock = clock or now_datetime
		self._lock = threading.RLock()
		self._appointments: List[Appointment] = []
		self._strategy = self._resolve_strategy(strategy or self.settings.default_strategy)

	# ===== STRATEGY / OBSERVERS =====

	def _resolve_strategy(self, strategy: Union[SchedulingStrategy, str]) -> SchedulingStrategy:
		if isinstance(strategy, str):
			return get_strategy(strategy, self.settings)
		return strategy

	@property
	def strategy(self) -> SchedulingStrategy:
		return self._strategy

	def set_strategy(self, strategy: Union[SchedulingStrategy, str]) -> None:
		"""Swap the active strategy. Committed appointments are not re-evaluated."""
		resolved = self._resolve_strategy(strategy)
		with self._lock:
			self._strategy = resolved
		_logger().info(f"Scheduling strategy set to {resolved.name}")

	def subscribe(self, observer: AppointmentObserver) -> None:
		self.dispatcher.subscribe(observer)

	def unsubscribe(self, observer: AppointmentObserver) -> None:
		self.dispatcher.unsubscribe(observer)

	# ===== LOAD / READ =====

	def load(self, appointments: Iterable[Appointment]) -> None:
		"""Replace the working collection wholesale."""
		appointments = list(appointments)
		with self._lock:
			self._appointments = appointments
		_logger().info(f"Scheduling engine loaded {len(appointments)} appointment(s)")

	def load_from_store(self) -> None:
		"""
		Carga la colección desde el store.

		Es un prerequisito explícito: si el store falla, la excepción se
		propaga y el caller debe reintentar.
		"""
		if self.store is None:
			raise InvalidAppointmentError("No appointment store configured")
		self.load(self.store.fetch_all())

	def list_all(self) -> List[Appointment]:
		with self._lock:
			return list(self._appointments)

	def get(self, appointment_id: str) -> Appointment:
		with self._lock:
			return self._appointments[self._index_of(appointment_id)]

	def list_for_staff(self, staff_id: str) -> List[Appointment]:
		return [a for a in self.list_all() if a.staff_id == staff_id]

	def list_for_day(self, day: Union[date, datetime, str]) -> List[Appointment]:
		target_date = getdate(day)
		return sorted(
			(a for a in self.list_all() if a.start_time.date() == target_date),
			key=lambda a: a.start_time
		)

	def find_slots(
		self,
		day: Union[date, datetime, str],
		duration_minutes: int,
		staff: Optional[Participant] = None
	) -> List[TimeSlot]:
		with self._lock:
			snapshot = list(self._appointments)
			strategy = self._strategy
		return strategy.find_available_slots(snapshot, day, int(duration_minutes), staff)

	# ===== MUTATIONS =====

	def create(
		self,
		title: str,
		start_time: DateTimeLike,
		end_time: DateTimeLike,
		client: Participant,
		staff: Optional[Participant],
		appointment_type: Union[AppointmentType, str] = AppointmentType.ONE_ON_ONE,
		clients: Optional[Sequence[Participant]] = None,
		recurrence_pattern: Optional[str] = None,
		**extra: Any
	) -> Appointment:
		"""
		Crea un appointment.

		Args:
			title: título del appointment
			start_time / end_time: intervalo [start, end)
			client: cliente principal
			staff: staff asignado (requerido)
			appointment_type: one-on-one, group o recurring
			clients: clientes adicionales (group)
			recurrence_pattern: patrón de recurrencia (recurring)
			**extra: description, location, notes, appointment_id

		Returns:
			Appointment: el appointment creado (status pending)

		Raises:
			InvalidAppointmentError: staff o cliente ausente, end <= start, campo extra desconocido
			AppointmentConflictError: el staff ya tiene una cita en ese horario
		"""
		if staff is None:
			raise InvalidAppointmentError("Staff member is required")
		if client is None:
			raise InvalidAppointmentError("Client is required")

		unknown = sorted(set(extra) - EXTRA_FIELDS)
		if unknown:
			raise InvalidAppointmentError(f"Unknown appointment field(s): {', '.join(unknown)}")

		start, end = self._validate_interval(start_time, end_time)

		with self._schedule_guard(staff.id):
			with self._lock:
				candidate = self.factory.build(
					appointment_type,
					title,
					start,
					end,
					client,
					staff,
					self._clock(),
					clients=clients,
					recurrence_pattern=recurrence_pattern,
					**extra
				)

				if any(a.id == candidate.id for a in self._appointments):
					raise InvalidAppointmentError(f"Appointment {candidate.id} already exists")

				self._ensure_no_conflict(candidate, self._appointments)
				self._appointments.append(candidate)

			self._sync_to_store(candidate)

		self._after_commit(candidate, ChangeKind.CREATED)
		return candidate

	def update_status(self, appointment_id: str, new_status: Union[AppointmentStatus, str]) -> Appointment:
		"""
		Cambia el status de un appointment.

		Cancelled y completed son terminales: cualquier cambio posterior se
		rechaza, excepto re-cancelar un appointment ya cancelado (no-op).

		Raises:
			AppointmentNotFoundError: el id no existe
			InvalidTransitionError: el appointment está en estado terminal
			InvalidAppointmentError: status desconocido
		"""
		try:
			new_status = AppointmentStatus(new_status)
		except ValueError:
			raise InvalidAppointmentError(f"Unknown appointment status: {new_status}")

		with self._schedule_guard(self._staff_of(appointment_id)):
			with self._lock:
				index = self._index_of(appointment_id)
				current = self._appointments[index]

				if current.status == AppointmentStatus.CANCELLED and new_status == AppointmentStatus.CANCELLED:
					return current

				self._ensure_transition(current, new_status)

				updated = replace(current, status=new_status, updated_at=self._clock())
				self._appointments[index] = updated

			self._sync_to_store(updated, previous=current)

		kind = ChangeKind.CANCELLED if new_status == AppointmentStatus.CANCELLED else ChangeKind.UPDATED
		self._after_commit(updated, kind)
		return updated

	def cancel(self, appointment_id: str) -> Appointment:
		"""Idempotent: cancelling a cancelled appointment succeeds."""
		return self.update_status(appointment_id, AppointmentStatus.CANCELLED)

	def reschedule(self, appointment_id: str, new_start: DateTimeLike, new_end: DateTimeLike) -> Appointment:
		"""
		Mueve un appointment a un nuevo horario.

		Si hay conflicto el appointment original queda intacto (sin
		escritura parcial).

		Raises:
			AppointmentNotFoundError: el id no existe
			InvalidTransitionError: el appointment está cancelado o completado
			InvalidAppointmentError: end <= start
			AppointmentConflictError: el nuevo horario choca con otra cita del staff
		"""
		start, end = self._validate_interval(new_start, new_end)

		with self._schedule_guard(self._staff_of(appointment_id)):
			with self._lock:
				index = self._index_of(appointment_id)
				current = self._appointments[index]

				if current.is_terminal:
					raise InvalidTransitionError(
						f"Appointment {appointment_id} is {current.status.value} and cannot be rescheduled"
					)

				provisional = replace(current, start_time=start, end_time=end)
				others = self._appointments[:index] + self._appointments[index + 1:]
				self._ensure_no_conflict(provisional, others)

				updated = replace(provisional, updated_at=self._clock())
				self._appointments[index] = updated

			self._sync_to_store(updated, previous=current)

		self._after_commit(updated, ChangeKind.RESCHEDULED)
		return updated

	# ===== HELPERS =====

	@contextmanager
	def _schedule_guard(self, staff_id: Optional[str]):
		"""
		Exclusión sobre la agenda del staff entre engines.

		Con store: toma store.lock_schedule y refresca en memoria los
		appointments del staff antes del check-then-commit. Sin store el
		lock del engine es suficiente.
		"""
		if self.store is None:
			yield
			return

		with self.store.lock_schedule(staff_id):
			fresh = self.store.fetch_schedule(staff_id)
			with self._lock:
				self._merge(fresh)
			yield

	def _merge(self, fresh: Iterable[Appointment]) -> None:
		# Lo del store reemplaza por id; lo que solo está en memoria se conserva
		fresh_by_id = {a.id: a for a in fresh}
		merged = [fresh_by_id.pop(a.id, a) for a in self._appointments]
		merged.extend(fresh_by_id.values())
		self._appointments = merged

	def _staff_of(self, appointment_id: str) -> Optional[str]:
		with self._lock:
			for appointment in self._appointments:
				if appointment.id == appointment_id:
					return appointment.staff_id

		# Creado por otro engine después de load_from_store
		if self.store is not None:
			for appointment in self.store.fetch_all():
				if appointment.id == appointment_id:
					return appointment.staff_id

		raise AppointmentNotFoundError(appointment_id)

	def _index_of(self, appointment_id: str) -> int:
		for index, appointment in enumerate(self._appointments):
			if appointment.id == appointment_id:
				return index
		raise AppointmentNotFoundError(appointment_id)

	def _validate_interval(self, start_time: DateTimeLike, end_time: DateTimeLike):
		# get_datetime(None) retorna "ahora", no sirve como validación
		if not start_time or not end_time:
			raise InvalidAppointmentError("Start and end datetime are required")

		try:
			start = get_datetime(start_time)
			end = get_datetime(end_time)
		except Exception:
			raise InvalidAppointmentError("Invalid start or end datetime")

		if not isinstance(start, datetime) or not isinstance(end, datetime):
			raise InvalidAppointmentError("Start and end datetime are required")

		if start >= end:
			raise InvalidAppointmentError("Start datetime must be before end datetime")

		return start, end

	def _ensure_transition(self, current: Appointment, new_status: AppointmentStatus) -> None:
		if current.is_terminal:
			raise InvalidTransitionError(
				f"Appointment {current.id} is {current.status.value}; status cannot change to {new_status.value}"
			)

		if self.settings.enforce_transitions and current.status != new_status:
			if new_status not in ALLOWED_TRANSITIONS[current.status]:
				raise InvalidTransitionError(
					f"Transition {current.status.value} -> {new_status.value} is not allowed"
				)

	def _ensure_no_conflict(self, candidate: Appointment, existing: Sequence[Appointment]) -> None:
		conflicting = self._strategy.check_conflicts(candidate, existing)
		if conflicting:
			_logger().info(
				f"Appointment {candidate.id} rejected: conflicts with {', '.join(conflicting)}"
			)
			raise AppointmentConflictError(
				f"Staff {candidate.staff_id} already has an appointment between "
				f"{candidate.start_time} and {candidate.end_time}",
				conflicting_ids=conflicting
			)

	def _after_commit(self, appointment: Appointment, change_kind: ChangeKind) -> None:
		_logger().info(f"Appointment {appointment.id} {change_kind.value}")
		self.dispatcher.dispatch(appointment, change_kind)

	def _restore(self, appointment_id: str, previous: Optional[Appointment]) -> None:
		index = self._index_of(appointment_id)
		if previous is None:
			del self._appointments[index]
		else:
			self._appointments[index] = previous

	def _sync_to_store(self, appointment: Appointment, previous: Optional[Appointment] = None) -> None:
		if self.store is None:
			return

		try:
			self.store.upsert(appointment)
		except AppointmentConflictError:
			# El store vio un solape que este engine no tenía: se deshace en memoria
			with self._lock:
				self._restore(appointment.id, previous)
			raise
		except Exception as e:
			# El commit en memoria se mantiene; el store se pone al día en el próximo sync
			frappe.log_error(
				title="Appointment Store Sync Failed",
				message=f"Error syncing appointment {appointment.id}: {str(e)}"
			)

# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Scheduling Domain Model

Immutable value objects shared by the scheduling services:
- Participant (role-tagged actor, owned by the identity system)
- Interval (half-open [start, end) time range)
- Appointment (the booked entity)
- TimeSlot (ephemeral candidate returned by slot search)
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class ParticipantRole(str, Enum):
	ADMIN = "admin"
	STAFF = "staff"
	CLIENT = "client"


class AppointmentStatus(str, Enum):
	PENDING = "pending"
	SCHEDULED = "scheduled"
	CONFIRMED = "confirmed"
	CANCELLED = "cancelled"
	COMPLETED = "completed"


class AppointmentType(str, Enum):
	ONE_ON_ONE = "one-on-one"
	GROUP = "group"
	RECURRING = "recurring"


class ChangeKind(str, Enum):
	CREATED = "created"
	UPDATED = "updated"
	RESCHEDULED = "rescheduled"
	CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset({AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED})

# Transiciones permitidas cuando enforce_transitions está activo
ALLOWED_TRANSITIONS = {
	AppointmentStatus.PENDING: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}),
	AppointmentStatus.SCHEDULED: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}),
	AppointmentStatus.CONFIRMED: frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}),
	AppointmentStatus.CANCELLED: frozenset(),
	AppointmentStatus.COMPLETED: frozenset(),
}


@dataclass(frozen=True)
class Participant:
	"""Actor of an appointment (admin, staff or client)."""

	id: str
	name: str
	email: str
	role: ParticipantRole = ParticipantRole.CLIENT
	phone: Optional[str] = None

	def as_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"name": self.name,
			"email": self.email,
			"role": self.role.value,
			"phone": self.phone,
		}


@dataclass(frozen=True)
class Interval:
	"""
	Rango de tiempo semi-abierto [start, end).

	Dos intervalos se solapan si y solo si a.start < b.end y b.start < a.end,
	por lo que intervalos consecutivos (a.end == b.start) no se solapan.
	"""

	start: datetime
	end: datetime

	@property
	def duration_minutes(self) -> int:
		return int((self.end - self.start).total_seconds() / 60)

	def overlaps(self, other: "Interval") -> bool:
		return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class Appointment:
	"""
	Cita entre un cliente y un miembro del staff.

	Es inmutable: el engine crea una copia nueva (dataclasses.replace) en
	cada cambio de estado u horario, así los observers nunca pueden
	modificar la cita que reciben.
	"""

	id: str
	title: str
	start_time: datetime
	end_time: datetime
	client: Participant
	staff: Optional[Participant] = None
	status: AppointmentStatus = AppointmentStatus.PENDING
	type: AppointmentType = AppointmentType.ONE_ON_ONE
	description: Optional[str] = None
	location: Optional[str] = None
	notes: Optional[str] = None
	clients: Tuple[Participant, ...] = field(default_factory=tuple)
	recurrence_pattern: Optional[str] = None
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None

	@property
	def interval(self) -> Interval:
		return Interval(self.start_time, self.end_time)

	@property
	def staff_id(self) -> Optional[str]:
		return self.staff.id if self.staff else None

	@property
	def is_active(self) -> bool:
		"""Cancelled appointments never block a slot."""
		return self.status != AppointmentStatus.CANCELLED

	@property
	def is_terminal(self) -> bool:
		return self.status in TERMINAL_STATUSES

	def as_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"title": self.title,
			"description": self.description,
			"start_time": self.start_time.strftime(DATETIME_FORMAT),
			"end_time": self.end_time.strftime(DATETIME_FORMAT),
			"client": self.client.as_dict(),
			"staff": self.staff.as_dict() if self.staff else None,
			"status": self.status.value,
			"type": self.type.value,
			"location": self.location,
			"notes": self.notes,
			"clients": [c.as_dict() for c in self.clients],
			"recurrence_pattern": self.recurrence_pattern,
			"created_at": self.created_at.strftime(DATETIME_FORMAT) if self.created_at else None,
			"updated_at": self.updated_at.strftime(DATETIME_FORMAT) if self.updated_at else None,
		}


@dataclass(frozen=True)
class TimeSlot:
	"""Candidate slot computed by the slot search. Never persisted."""

	id: str
	start_time: datetime
	end_time: datetime
	is_available: bool

	@classmethod
	def build(cls, start: datetime, end: datetime, is_available: bool, tz=None) -> "TimeSlot":
		# Sin tz el epoch se calcula con la zona local del proceso
		instant = tz.localize(start) if tz is not None and start.tzinfo is None else start
		return cls(
			id=f"slot-{int(instant.timestamp() * 1000)}",
			start_time=start,
			end_time=end,
			is_available=is_available,
		)

	def as_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"start": self.start_time.strftime(DATETIME_FORMAT),
			"end": self.end_time.strftime(DATETIME_FORMAT),
			"is_available": self.is_available,
		}

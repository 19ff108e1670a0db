# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Appointment Factory

Factory pattern to build the right appointment shape based on type.
The type only changes which optional attributes are attached (clients
for group appointments, recurrence pattern for recurring ones); the
scheduling rules are the same for all of them.
"""

import uuid
from datetime import datetime
from typing import Any, Optional, Sequence

from .exceptions import InvalidAppointmentError
from .models import Appointment, AppointmentStatus, AppointmentType, Participant


DEFAULT_RECURRENCE_PATTERN = "weekly"


def new_appointment_id() -> str:
	return f"appt-{uuid.uuid4().hex}"


class AppointmentFactory:
	"""Builds pending appointments stamped with the given creation time."""

	def create_one_on_one(
		self,
		title: str,
		start_time: datetime,
		end_time: datetime,
		client: Participant,
		staff: Optional[Participant],
		now: datetime,
		appointment_id: Optional[str] = None,
		**extra: Any
	) -> Appointment:
		return Appointment(
			id=appointment_id or new_appointment_id(),
			title=title,
			start_time=start_time,
			end_time=end_time,
			client=client,
			staff=staff,
			status=AppointmentStatus.PENDING,
			type=AppointmentType.ONE_ON_ONE,
			created_at=now,
			updated_at=now,
			**extra
		)

	def create_group(
		self,
		title: str,
		start_time: datetime,
		end_time: datetime,
		clients: Sequence[Participant],
		staff: Optional[Participant],
		now: datetime,
		appointment_id: Optional[str] = None,
		**extra: Any
	) -> Appointment:
		if not clients:
			raise InvalidAppointmentError("Group appointments need at least one client")

		# El primer cliente es el cliente principal
		return Appointment(
			id=appointment_id or new_appointment_id(),
			title=title,
			start_time=start_time,
			end_time=end_time,
			client=clients[0],
			clients=tuple(clients),
			staff=staff,
			status=AppointmentStatus.PENDING,
			type=AppointmentType.GROUP,
			created_at=now,
			updated_at=now,
			**extra
		)

	def create_recurring(
		self,
		title: str,
		start_time: datetime,
		end_time: datetime,
		client: Participant,
		staff: Optional[Participant],
		now: datetime,
		recurrence_pattern: str = DEFAULT_RECURRENCE_PATTERN,
		appointment_id: Optional[str] = None,
		**extra: Any
	) -> Appointment:
		return Appointment(
			id=appointment_id or new_appointment_id(),
			title=title,
			start_time=start_time,
			end_time=end_time,
			client=client,
			staff=staff,
			status=AppointmentStatus.PENDING,
			type=AppointmentType.RECURRING,
			recurrence_pattern=recurrence_pattern or DEFAULT_RECURRENCE_PATTERN,
			created_at=now,
			updated_at=now,
			**extra
		)

	def build(
		self,
		appointment_type: Any,
		title: str,
		start_time: datetime,
		end_time: datetime,
		client: Participant,
		staff: Optional[Participant],
		now: datetime,
		clients: Optional[Sequence[Participant]] = None,
		recurrence_pattern: Optional[str] = None,
		**extra: Any
	) -> Appointment:
		"""
		Construye el appointment según su tipo.

		Args:
			appointment_type: AppointmentType o su valor ("one-on-one", "group", "recurring")

		Raises:
			InvalidAppointmentError: si el tipo no es soportado
		"""
		try:
			appointment_type = AppointmentType(appointment_type)
		except ValueError:
			raise InvalidAppointmentError(f"Unsupported appointment type: {appointment_type}")

		if appointment_type == AppointmentType.ONE_ON_ONE:
			return self.create_one_on_one(title, start_time, end_time, client, staff, now, **extra)
		elif appointment_type == AppointmentType.GROUP:
			group = list(clients or [])
			if client not in group:
				group.insert(0, client)
			return self.create_group(title, start_time, end_time, group, staff, now, **extra)
		else:
			return self.create_recurring(
				title, start_time, end_time, client, staff, now,
				recurrence_pattern=recurrence_pattern or DEFAULT_RECURRENCE_PATTERN,
				**extra
			)

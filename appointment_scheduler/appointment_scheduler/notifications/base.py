# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Base Appointment Observer

Defines the interface that all appointment observers must implement.
"""

from abc import ABC, abstractmethod

from appointment_scheduler.appointment_scheduler.scheduling.models import Appointment, ChangeKind


class AppointmentObserver(ABC):
	"""
	Interfaz base para observers de appointments.

	Los observers son consumidores de solo efectos secundarios (email,
	SMS, sincronización de calendario). Reciben un Appointment inmutable.
	"""

	@abstractmethod
	def update(self, appointment: Appointment, change_kind: ChangeKind) -> None:
		"""
		Reacciona a un cambio ya confirmado en el engine.

		Args:
			appointment: Appointment después del cambio
			change_kind: created, updated, rescheduled o cancelled
		"""
		pass

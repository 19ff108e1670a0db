# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Base Calendar Sync Adapter

Defines the interface that all calendar sync adapters must implement.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from appointment_scheduler.appointment_scheduler.scheduling.models import Appointment


class CalendarSyncAdapter(ABC):
	"""
	Interfaz base para adaptadores de calendario externo.

	Todos los adaptadores deben implementar estos métodos.
	"""

	provider = "base"

	def __init__(self, settings: Optional[Dict[str, Any]] = None):
		self.settings = settings or {}

	@abstractmethod
	def create_event(self, appointment: Appointment) -> str:
		"""
		Crea el evento en el proveedor.

		Returns:
			str: id del evento en el proveedor

		Raises:
			CalendarSyncError: si falla la creación
		"""
		pass

	@abstractmethod
	def update_event(self, event_id: str, appointment: Appointment) -> bool:
		"""Actualiza título, horario y estado del evento."""
		pass

	@abstractmethod
	def delete_event(self, event_id: str) -> bool:
		"""Cancela/elimina el evento."""
		pass

	def validate_settings(self) -> None:
		"""Valida que la configuración tenga las credenciales requeridas."""
		if not self.settings.get("access_token"):
			raise CalendarSyncError(f"{self.provider}: access_token es requerido")


class CalendarSyncError(Exception):
	"""Excepción para errores de sincronización de calendario."""
	pass

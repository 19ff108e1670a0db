# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Appointment Dispatcher

Synchronous fan-out of committed appointment changes to the subscribed
observers, in subscription order.
"""

import threading
from typing import List

import frappe

from appointment_scheduler.appointment_scheduler.scheduling.models import Appointment, ChangeKind

from .base import AppointmentObserver


class AppointmentDispatcher:
	"""
	Mantiene la lista de observers y les entrega cada cambio.

	Un observer que falla no impide la entrega a los siguientes: el error
	se registra en Error Log y se continúa.
	"""

	def __init__(self):
		self._observers: List[AppointmentObserver] = []
		self._lock = threading.Lock()

	@property
	def observers(self) -> List[AppointmentObserver]:
		with self._lock:
			return list(self._observers)

	def subscribe(self, observer: AppointmentObserver) -> None:
		with self._lock:
			if any(existing is observer for existing in self._observers):
				return
			self._observers.append(observer)

	def unsubscribe(self, observer: AppointmentObserver) -> None:
		with self._lock:
			self._observers = [existing for existing in self._observers if existing is not observer]

	def dispatch(self, appointment: Appointment, change_kind: ChangeKind) -> int:
		"""
		Entrega el cambio a cada observer.

		Se itera sobre una copia de la lista: un observer puede
		desuscribirse dentro de su propio callback sin alterar esta entrega.

		Returns:
			int: cantidad de observers que procesaron el cambio sin error
		"""
		change_kind = ChangeKind(change_kind)
		delivered = 0

		for observer in self.observers:
			try:
				observer.update(appointment, change_kind)
				delivered += 1
			except Exception as e:
				frappe.log_error(
					title="Appointment Observer Failed",
					message=(
						f"{type(observer).__name__} failed on {change_kind.value} "
						f"for appointment {appointment.id}: {str(e)}"
					)
				)

		return delivered

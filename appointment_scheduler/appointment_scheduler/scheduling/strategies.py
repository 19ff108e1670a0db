# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Scheduling Strategies

Swappable policies for slot search and conflict checking:
- StandardStrategy: plain overlap check and grid enumeration
- PrioritizedStrategy: same slots, morning slots first
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence, Union

from .exceptions import InvalidAppointmentError
from .models import Appointment, Participant, TimeSlot
from .overlap import find_conflicts
from .settings import SchedulingSettings
from .slots import generate_slots


class SchedulingStrategy(ABC):
	"""
	Interfaz base para estrategias de agendamiento.

	Todas las estrategias deben implementar estos métodos. Reciben el
	snapshot de appointments en cada llamada: una estrategia no guarda
	estado de la colección.
	"""

	name = "base"

	@abstractmethod
	def find_available_slots(
		self,
		appointments: Sequence[Appointment],
		day: Union[date, datetime, str],
		duration_minutes: int,
		staff: Optional[Participant] = None
	) -> List[TimeSlot]:
		"""
		Genera los slots candidatos del día.

		Returns:
			list[TimeSlot]: slots con is_available marcado
		"""
		pass

	@abstractmethod
	def check_conflicts(
		self,
		candidate: Appointment,
		appointments: Iterable[Appointment]
	) -> List[str]:
		"""
		Retorna los ids de appointments que bloquean al candidato.

		Lista vacía significa que no hay conflicto.
		"""
		pass


class StandardStrategy(SchedulingStrategy):
	"""Delegates to the overlap and slot services without reordering."""

	name = "standard"

	def __init__(self, settings: Optional[SchedulingSettings] = None):
		self.settings = settings or SchedulingSettings()

	def find_available_slots(self, appointments, day, duration_minutes, staff=None):
		return generate_slots(day, duration_minutes, appointments, staff=staff, settings=self.settings)

	def check_conflicts(self, candidate, appointments):
		return find_conflicts(candidate, appointments)


class PrioritizedStrategy(SchedulingStrategy):
	"""
	Morning-first ordering on top of a wrapped strategy.

	Slots starting before the morning cutoff (12:00) come first, then the
	rest; ascending by start inside each group. Availability and conflict
	checks are those of the wrapped strategy.
	"""

	name = "prioritized"

	def __init__(
		self,
		base: Optional[SchedulingStrategy] = None,
		settings: Optional[SchedulingSettings] = None
	):
		self.settings = settings or SchedulingSettings()
		self.base = base or StandardStrategy(self.settings)

	def _priority_key(self, slot: TimeSlot):
		is_morning = slot.start_time.time() < self.settings.morning_cutoff
		return (0 if is_morning else 1, slot.start_time)

	def find_available_slots(self, appointments, day, duration_minutes, staff=None):
		slots = self.base.find_available_slots(appointments, day, duration_minutes, staff)
		return sorted(slots, key=self._priority_key)

	def check_conflicts(self, candidate, appointments):
		return self.base.check_conflicts(candidate, appointments)


def get_strategy(name: str, settings: Optional[SchedulingSettings] = None) -> SchedulingStrategy:
	"""
	Factory para obtener la estrategia correcta según nombre.

	Args:
		name: "standard" o "prioritized"

	Returns:
		SchedulingStrategy: instancia de la estrategia

	Raises:
		InvalidAppointmentError: si la estrategia no es soportada
	"""
	if name == StandardStrategy.name:
		return StandardStrategy(settings)
	elif name == PrioritizedStrategy.name:
		return PrioritizedStrategy(settings=settings)
	else:
		raise InvalidAppointmentError(f"Unsupported scheduling strategy: {name}")

# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Slot Generation Service

Generates discrete time slots for UI display, considering:
- Business window (09:00-17:00 by default)
- Fixed 30 minute grid of candidate starts
- Existing appointments of the requested staff
"""

from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Union

import pytz
from frappe.utils import getdate

from .models import Appointment, Participant, TimeSlot
from .overlap import check_overlap
from .settings import SchedulingSettings


def get_business_window(
	day: Union[date, datetime, str],
	settings: Optional[SchedulingSettings] = None
) -> tuple:
	"""
	Retorna (inicio, fin) de la ventana de atención para el día.

	Ambos extremos son naive, como los datetimes guardados en la base.
	"""
	settings = settings or SchedulingSettings()
	target_date = getdate(day)

	window_start = datetime.combine(target_date, settings.business_start)
	window_end = datetime.combine(target_date, settings.business_end)

	return window_start, window_end


def generate_slots(
	day: Union[date, datetime, str],
	duration_minutes: int,
	appointments: Iterable[Appointment],
	staff: Optional[Participant] = None,
	settings: Optional[SchedulingSettings] = None
) -> List[TimeSlot]:
	"""
	Genera slots discretos para un día.

	Args:
		day: fecha (date, datetime o string YYYY-MM-DD)
		duration_minutes: duración de cada slot
		appointments: snapshot de appointments existentes
		staff: si se especifica, solo cuentan sus appointments
		settings: ventana y grilla (default 09:00-17:00 cada 30 min)

	Returns:
		list[TimeSlot]: todos los slots de la grilla, disponibles o no

	Algoritmo:
		1. Calcular ventana de atención del día
		2. Para cada inicio en la grilla (start < fin de ventana):
			a. end = start + duration_minutes
			b. Verificar overlaps contra appointments del staff
			c. Marcar is_available
		3. Retornar lista ordenada por construcción

	Nota:
		Los slots cuyo end pasa del fin de la ventana NO se recortan ni se
		descartan (un slot de 60 min a las 16:30 termina a las 17:30).
		Los slots no disponibles también se retornan para que la UI los
		muestre deshabilitados.
	"""
	if duration_minutes <= 0:
		raise ValueError("duration_minutes must be positive")

	settings = settings or SchedulingSettings()
	window_start, window_end = get_business_window(day, settings)

	# La zona solo se usa para el id (epoch ms) de cada slot
	tz = pytz.timezone(settings.timezone) if settings.timezone else None

	# Se itera varias veces sobre la colección
	appointments = list(appointments)

	step = timedelta(minutes=settings.slot_interval_minutes)
	duration = timedelta(minutes=duration_minutes)

	slots = []
	current_slot_start = window_start

	while current_slot_start < window_end:
		current_slot_end = current_slot_start + duration

		overlap_result = check_overlap(
			current_slot_start,
			current_slot_end,
			appointments,
			staff=staff
		)

		slots.append(TimeSlot.build(
			current_slot_start,
			current_slot_end,
			is_available=not overlap_result["has_overlap"],
			tz=tz
		))

		current_slot_start += step

	return slots

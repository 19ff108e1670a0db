# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Overlap Detection Service

Detects scheduling conflicts (overlaps) between appointments,
considering:
- Half-open interval semantics (back-to-back appointments never conflict)
- Appointment status (cancelled appointments never block)
- Assigned staff (only the same staff member can be double-booked)
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from .models import Appointment, Interval, Participant


def overlaps(a: Interval, b: Interval) -> bool:
	"""Half-open overlap test: a.start < b.end and b.start < a.end."""
	return a.start < b.end and b.start < a.end


def _same_staff(staff: Optional[Participant], existing: Appointment) -> bool:
	# Solo se descarta por staff cuando ambos lados tienen staff asignado
	if staff is None or existing.staff is None:
		return True
	return staff.id == existing.staff.id


def check_overlap(
	start_datetime: datetime,
	end_datetime: datetime,
	appointments: Iterable[Appointment],
	staff: Optional[Participant] = None,
	exclude_appointment: Optional[str] = None,
	same_staff_only: bool = True
) -> Dict[str, Any]:
	"""
	Detecta overlaps con appointments existentes.

	Args:
		start_datetime: inicio del rango a validar
		end_datetime: fin del rango a validar
		appointments: colección (snapshot) de appointments existentes
		staff: staff del candidato; si es None no se filtra por staff
		exclude_appointment: id del Appointment a excluir (para ediciones)
		same_staff_only: si es False se ignora el staff por completo

	Returns:
		dict: {
			"has_overlap": bool,
			"overlapping_appointments": [list of appointment ids]
		}

	Algoritmo:
		1. Para cada appointment existente:
			- excluir exclude_appointment (no hay self-conflict)
			- excluir status cancelled
			- excluir staff distinto (cuando ambos tienen staff)
			- verificar overlap semi-abierto
		2. Retornar ids en orden de la colección
	"""
	candidate = Interval(start_datetime, end_datetime)
	overlapping: List[str] = []

	for existing in appointments:
		if exclude_appointment and existing.id == exclude_appointment:
			continue

		if not existing.is_active:
			continue

		if same_staff_only and not _same_staff(staff, existing):
			continue

		if overlaps(candidate, existing.interval):
			overlapping.append(existing.id)

	return {
		"has_overlap": bool(overlapping),
		"overlapping_appointments": overlapping,
	}


def find_conflicts(
	candidate: Appointment,
	existing: Iterable[Appointment],
	same_staff_only: bool = True
) -> List[str]:
	"""Ids of the active appointments that block ``candidate`` (self excluded)."""
	result = check_overlap(
		candidate.start_time,
		candidate.end_time,
		existing,
		staff=candidate.staff,
		exclude_appointment=candidate.id,
		same_staff_only=same_staff_only,
	)
	return result["overlapping_appointments"]


def has_conflict(
	candidate: Appointment,
	existing: Iterable[Appointment],
	same_staff_only: bool = True
) -> bool:
	return bool(find_conflicts(candidate, existing, same_staff_only))

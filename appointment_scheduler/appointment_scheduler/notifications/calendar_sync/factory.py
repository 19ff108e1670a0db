# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Calendar Sync Adapter Factory

Factory pattern to get the correct adapter based on provider.
"""

from typing import Any, Dict, Optional

from .base import CalendarSyncAdapter


def get_adapter(provider: str, settings: Optional[Dict[str, Any]] = None) -> CalendarSyncAdapter:
	"""
	Factory para obtener el adapter correcto según proveedor.

	Args:
		provider: "google_calendar" o "microsoft_outlook"
		settings: credenciales del proveedor (access_token, calendar_id)

	Returns:
		CalendarSyncAdapter: instancia del adapter

	Raises:
		ValueError: si provider no es soportado
	"""
	if provider == "google_calendar":
		from .google_calendar import GoogleCalendarAdapter
		return GoogleCalendarAdapter(settings)
	elif provider == "microsoft_outlook":
		from .microsoft_outlook import OutlookCalendarAdapter
		return OutlookCalendarAdapter(settings)
	else:
		raise ValueError(f"Unsupported provider: {provider}")

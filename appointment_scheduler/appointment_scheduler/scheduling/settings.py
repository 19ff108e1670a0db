# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Scheduling Settings

Business window, slot grid and engine policy knobs. Defaults match the
booking rules (09:00-17:00, 30 minute grid). A site can override them in
site_config.json under the "appointment_scheduler" key:

	{
		"appointment_scheduler": {
			"business_start": "08:00",
			"slot_interval_minutes": 15,
			"default_strategy": "prioritized"
		}
	}
"""

from dataclasses import dataclass, fields
from datetime import datetime, time, timedelta
from typing import Any, Dict, Optional, Union

import frappe
from frappe.utils import get_time


CONF_KEY = "appointment_scheduler"


def _to_time(time_value: Union[time, timedelta, str]) -> time:
	"""
	Convierte diferentes formatos de tiempo a datetime.time.

	Args:
		time_value: puede ser time, timedelta (desde medianoche), o string

	Returns:
		datetime.time object
	"""
	if isinstance(time_value, time):
		return time_value
	elif isinstance(time_value, timedelta):
		# timedelta representa tiempo desde medianoche
		return (datetime.min + time_value).time()
	elif isinstance(time_value, str):
		return get_time(time_value)
	else:
		raise ValueError(f"Cannot convert {type(time_value)} to time")


@dataclass(frozen=True)
class SchedulingSettings:
	business_start: time = time(9, 0)
	business_end: time = time(17, 0)
	slot_interval_minutes: int = 30
	morning_cutoff: time = time(12, 0)
	default_strategy: str = "standard"
	enforce_transitions: bool = False
	timezone: Optional[str] = None

	@classmethod
	def from_conf(cls, conf: Optional[Dict[str, Any]]) -> "SchedulingSettings":
		"""Build settings from a dict, ignoring unknown keys."""
		conf = conf or {}
		known = {f.name for f in fields(cls)}
		values = {key: value for key, value in conf.items() if key in known}

		for key in ("business_start", "business_end", "morning_cutoff"):
			if key in values:
				values[key] = _to_time(values[key])

		if "slot_interval_minutes" in values:
			values["slot_interval_minutes"] = int(values["slot_interval_minutes"])
		if "enforce_transitions" in values:
			values["enforce_transitions"] = bool(values["enforce_transitions"])

		settings = cls(**values)
		if settings.slot_interval_minutes <= 0:
			raise ValueError("slot_interval_minutes must be positive")
		if settings.business_start >= settings.business_end:
			raise ValueError("business_start must be before business_end")
		return settings


def get_settings() -> SchedulingSettings:
	"""Settings for the current site (frappe.conf)."""
	return SchedulingSettings.from_conf(frappe.conf.get(CONF_KEY))

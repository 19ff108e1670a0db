"""
Appointment Scheduler API

Structure:
    api/
    ├── __init__.py              # This file
    ├── appointment_api.py       # Whitelisted endpoints
    └── shared/                  # Shared utilities
        ├── __init__.py
        └── validators.py        # Input validators

Usage:
    frappe.call("appointment_scheduler.api.appointment_api.get_available_slots", ...)
"""

from . import shared

__all__ = [
	"shared",
]

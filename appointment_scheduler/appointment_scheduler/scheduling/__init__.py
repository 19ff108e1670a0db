"""
Scheduling Services Module

This module provides core business logic for appointment scheduling:
- Domain model (models.py)
- Overlap detection (overlap.py)
- Slot generation for UI (slots.py)
- Scheduling strategies (strategies.py)
- Appointment factory (factory.py)
- Scheduling engine / mediator (engine.py)
"""

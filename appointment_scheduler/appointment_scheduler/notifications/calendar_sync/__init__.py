"""
Calendar Sync Module

Provides adapters for mirroring appointments into external calendars:
- Base adapter interface (base.py)
- Factory for getting the right adapter (factory.py)
- Google Calendar implementation (google_calendar.py)
- Microsoft Outlook implementation (microsoft_outlook.py)
- Observer that drives the adapter on every change (observer.py)
"""

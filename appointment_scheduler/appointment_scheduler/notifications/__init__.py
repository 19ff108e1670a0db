"""
Notifications Module

Change-notification fan-out for appointments:
- Observer interface (base.py)
- Dispatcher (dispatcher.py)
- Email notifications (email.py)
- SMS notifications (sms.py)
- Calendar sync adapters (calendar_sync/)
"""

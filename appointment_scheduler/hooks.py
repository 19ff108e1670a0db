app_name = "appointment_scheduler"
app_title = "Appointment Scheduler"
app_publisher = "Sebastian Ortiz Valencia"
app_description = "Agendamiento de citas entre clientes y staff sin doble reserva"
app_email = "sebastianortiz989@gmail.com"
app_license = "mit"

# Apps
# ------------------

# required_apps = []

# Appointment Observers
# ---------------------
# Factories (dotted paths) called on every engine built by the API.
# Each returns an AppointmentObserver, or None to skip.
# Other apps can append their own observers from their hooks.py

appointment_observers = [
	"appointment_scheduler.appointment_scheduler.notifications.email.EmailNotificationObserver",
	"appointment_scheduler.appointment_scheduler.notifications.sms.SMSNotificationObserver",
	"appointment_scheduler.appointment_scheduler.notifications.calendar_sync.observer.from_site_config",
]

# Appointment Email Recipients
# ----------------------------
# Callables receiving the Appointment, returning extra email recipients

# appointment_email_recipients = [
# 	"my_app.notifications.extra_recipients"
# ]

from .health import health_bp
from .auth import auth_bp
from .courts import court_bp
from .timeslots import timeslot_bp
from .booking import booking_bp
from .admin import admin_bp

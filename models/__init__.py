from .db import db
from .user import User, Role, user_roles
from .user_session import UserSession
from .audit_log import AuditLog
from .court import Court, MaintenanceWindow, COURT_FEATURES
from .timeslot import TimeSlot, WEEKDAYS
from .booking import Booking

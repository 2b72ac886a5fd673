from models import db
from models.court import Court
from models.timeslot import TimeSlot, WEEKDAYS
from models.user import Role
from services.availability import format_hhmm

DEFAULT_ROLES = ["PLAYER", "ADMIN"]

REGULAR_PRICE = 1000
EVENING_PRICE = 1200
WEEKEND_PRICE = 1500
EVENING_FROM_HOUR = 17

SAMPLE_COURTS = [
    {
        "name": "Court A - Premium",
        "description": "Premium futsal court with professional turf and equipment",
        "capacity": 10,
        "price_per_hour": 1000,
        "features": ["cafeteria", "lights", "lockers", "parking", "showers"],
    },
    {
        "name": "Court B - Standard",
        "description": "Standard futsal court suitable for casual games",
        "capacity": 8,
        "price_per_hour": 800,
        "features": ["lights", "parking"],
    },
    {
        "name": "Court C - Basic",
        "description": "Basic futsal court for practice sessions",
        "capacity": 6,
        "price_per_hour": 600,
        "features": ["lights"],
    },
]

def seed_roles():
    existing = {r.name for r in Role.query.all()}
    for name in DEFAULT_ROLES:
        if name not in existing:
            db.session.add(Role(name=name))
    db.session.commit()

def seed_default_time_slots(start_hour: int, end_hour: int) -> int:
    """
    Weekly template of one-hour slots for every day over [start_hour, end_hour).
    Does nothing if any time slot exists. Returns the number of rows created.
    """
    if TimeSlot.query.count() > 0:
        return 0

    created = 0
    for day in WEEKDAYS:
        weekend = day in ("Saturday", "Sunday")
        for hour in range(start_hour, end_hour):
            evening = hour >= EVENING_FROM_HOUR
            if weekend:
                price = WEEKEND_PRICE
            elif evening:
                price = EVENING_PRICE
            else:
                price = REGULAR_PRICE
            db.session.add(TimeSlot(
                day=day,
                start_time=format_hhmm(hour * 60),
                end_time=format_hhmm((hour + 1) * 60),
                price=price,
                is_available=True,
                is_special_price=weekend or evening,
            ))
            created += 1
    db.session.commit()
    return created

def seed_sample_courts() -> int:
    if Court.query.count() > 0:
        return 0
    for values in SAMPLE_COURTS:
        db.session.add(Court(is_available=True, **values))
    db.session.commit()
    return len(SAMPLE_COURTS)

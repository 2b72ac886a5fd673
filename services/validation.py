"""
Request payload parsing.

Each parse_* function takes the decoded JSON body, collects every problem it
finds and raises one ValidationError whose details list them all. On
success it returns a dict of cleaned values ready for the service layer.
"""
from datetime import date, datetime

from models.booking import BOOKING_STATUSES, PAYMENT_METHODS
from models.court import COURT_FEATURES
from models.timeslot import WEEKDAYS
from services.availability import is_valid_hhmm, normalize_hhmm, parse_hhmm
from services.errors import ValidationError

MIN_DURATION_HOURS = 1
MAX_DURATION_HOURS = 4
MIN_PLAYERS = 1
MAX_PLAYERS = 10
MAX_NOTES_LENGTH = 500
MAX_REASON_LENGTH = 500


def parse_date(value):
    """ISO date ('2025-06-01', or a datetime string whose date part is used). None if unparseable."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    value = value.strip()
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        return None


def as_int(value):
    # JSON true/false must not sneak through as 1/0
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        # let int() decide; "²" and other non-decimal digits come back as None
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _check_range(errors, data, start_key="start_time", end_key="end_time"):
    start = data.get(start_key)
    end = data.get(end_key)
    ok = True
    if not start:
        errors.append("Start time is required")
        ok = False
    elif not is_valid_hhmm(start):
        errors.append("Start time should be in HH:MM format")
        ok = False
    if not end:
        errors.append("End time is required")
        ok = False
    elif not is_valid_hhmm(end):
        errors.append("End time should be in HH:MM format")
        ok = False
    if ok and parse_hhmm(end) <= parse_hhmm(start):
        errors.append("End time must be after start time")
        ok = False
    if ok:
        return normalize_hhmm(start), normalize_hhmm(end)
    return None, None


def _optional_text(errors, data, key, label, max_length):
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        errors.append(f"{label} must be a string")
        return None
    value = value.strip()
    if len(value) > max_length:
        errors.append(f"{label} cannot exceed {max_length} characters")
        return None
    return value or None


def _optional_bool(errors, data, key, label):
    if key not in data or data[key] is None:
        return None
    if not isinstance(data[key], bool):
        errors.append(f"{label} must be a boolean value")
        return None
    return data[key]


def parse_booking_request(data: dict, today: date) -> dict:
    errors = []

    court_id = None
    if data.get("court_id") is not None:
        court_id = as_int(data.get("court_id"))
        if court_id is None:
            errors.append("court_id must be an integer")

    raw_date = data.get("date")
    day = None
    if not raw_date:
        errors.append("Date is required")
    else:
        day = parse_date(raw_date)
        if day is None:
            errors.append("Please provide a valid date")
        elif day < today:
            errors.append("Booking date cannot be in the past")

    start_time, end_time = _check_range(errors, data)

    duration = as_int(data.get("duration"))
    if data.get("duration") is None:
        errors.append("Duration is required")
    elif duration is None or not MIN_DURATION_HOURS <= duration <= MAX_DURATION_HOURS:
        errors.append(f"Duration must be between {MIN_DURATION_HOURS} and {MAX_DURATION_HOURS} hours")
    elif start_time and parse_hhmm(end_time) - parse_hhmm(start_time) != duration * 60:
        # duration drives the price, so it has to describe the booked range
        errors.append("Duration must match the time between start and end time")

    players = as_int(data.get("number_of_players"))
    if data.get("number_of_players") is None:
        errors.append("Number of players is required")
    elif players is None or not MIN_PLAYERS <= players <= MAX_PLAYERS:
        errors.append(f"Number of players must be between {MIN_PLAYERS} and {MAX_PLAYERS}")

    equipment = _optional_bool(errors, data, "equipment", "equipment")
    notes = _optional_text(errors, data, "notes", "Notes", MAX_NOTES_LENGTH)

    price = None
    if data.get("price") is not None:
        price = as_int(data.get("price"))
        if price is None or price < 0:
            errors.append("Price must be a non-negative number")

    if errors:
        raise ValidationError("Invalid booking request", details=errors)

    return {
        "court_id": court_id,
        "date": day,
        "start_time": start_time,
        "end_time": end_time,
        "duration": duration,
        "number_of_players": players,
        "equipment": bool(equipment),
        "notes": notes,
        "price": price,
    }


def parse_reason(value):
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("Cancellation reason must be a string")
    value = value.strip()
    if len(value) > MAX_REASON_LENGTH:
        raise ValidationError(f"Cancellation reason cannot exceed {MAX_REASON_LENGTH} characters")
    return value or None


def parse_status(value) -> str:
    status = (value or "").strip().lower() if isinstance(value, str) else ""
    if status not in BOOKING_STATUSES:
        raise ValidationError("Invalid status value", details=[f"status must be one of {', '.join(BOOKING_STATUSES)}"])
    return status


def parse_payment_update(data: dict) -> dict:
    errors = []
    out = {}
    if "payment_status" in data:
        # refunds only happen through cancellation
        if data["payment_status"] not in ("unpaid", "paid"):
            errors.append("Invalid payment status value")
        else:
            out["payment_status"] = data["payment_status"]
    if "payment_method" in data:
        if data["payment_method"] not in PAYMENT_METHODS:
            errors.append("Invalid payment method value")
        else:
            out["payment_method"] = data["payment_method"]
    if not out and not errors:
        errors.append("payment_status or payment_method is required")
    if errors:
        raise ValidationError("Invalid payment update", details=errors)
    return out


def parse_court_payload(data: dict, partial: bool = False) -> dict:
    errors = []
    out = {}

    if "name" in data or not partial:
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            errors.append("Court name is required")
        elif len(name.strip()) > 120:
            errors.append("Court name cannot exceed 120 characters")
        else:
            out["name"] = name.strip()

    if "description" in data:
        out["description"] = _optional_text(errors, data, "description", "Description", 500)

    if "capacity" in data or not partial:
        capacity = as_int(data.get("capacity"))
        if capacity is None or not 1 <= capacity <= 15:
            errors.append("Capacity must be between 1 and 15 players")
        else:
            out["capacity"] = capacity

    if "price_per_hour" in data or not partial:
        price = as_int(data.get("price_per_hour"))
        if price is None or price < 0:
            errors.append("Price per hour must be a non-negative number")
        else:
            out["price_per_hour"] = price

    is_available = _optional_bool(errors, data, "is_available", "is_available")
    if is_available is not None:
        out["is_available"] = is_available

    if "features" in data:
        features = data.get("features")
        if not isinstance(features, list) or any(f not in COURT_FEATURES for f in features):
            errors.append(f"features must be a list drawn from {', '.join(COURT_FEATURES)}")
        else:
            out["features"] = sorted(set(features))

    if errors:
        raise ValidationError("Invalid court", details=errors)
    return out


def parse_maintenance_payload(data: dict) -> dict:
    errors = []
    start = parse_date(data.get("start_date"))
    end = parse_date(data.get("end_date"))
    if start is None:
        errors.append("start_date must be a valid date")
    if end is None:
        errors.append("end_date must be a valid date")
    if start and end and end < start:
        errors.append("end_date must not be before start_date")
    reason = _optional_text(errors, data, "reason", "Reason", 255)
    if errors:
        raise ValidationError("Invalid maintenance window", details=errors)
    return {"start_date": start, "end_date": end, "reason": reason}


def parse_time_slot_payload(data: dict) -> dict:
    errors = []

    day = data.get("day")
    if not day:
        errors.append("Day is required")
    elif day not in WEEKDAYS:
        errors.append("Invalid day value")

    start_time, end_time = _check_range(errors, data)

    price = as_int(data.get("price"))
    if data.get("price") is None:
        errors.append("Price is required")
    elif price is None or price < 0:
        errors.append("Price must be a non-negative number")

    is_available = _optional_bool(errors, data, "is_available", "is_available")
    is_special_price = _optional_bool(errors, data, "is_special_price", "is_special_price")

    if errors:
        raise ValidationError("Invalid time slot", details=errors)

    return {
        "day": day,
        "start_time": start_time,
        "end_time": end_time,
        "price": price,
        "is_available": True if is_available is None else is_available,
        "is_special_price": False if is_special_price is None else is_special_price,
    }


def parse_time_slot_update(data: dict) -> dict:
    errors = []
    out = {}
    if "price" in data:
        price = as_int(data.get("price"))
        if price is None or price < 0:
            errors.append("Price must be a non-negative number")
        else:
            out["price"] = price
    for key in ("is_available", "is_special_price"):
        value = _optional_bool(errors, data, key, key)
        if value is not None:
            out[key] = value
    if errors:
        raise ValidationError("Invalid time slot update", details=errors)
    return out

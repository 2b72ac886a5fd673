def _iso(value):
    return value.isoformat() if value else None


def court_to_dict(c):
    return {
        "id": c.id,
        "name": c.name,
        "description": c.description,
        "capacity": c.capacity,
        "price_per_hour": c.price_per_hour,
        "is_available": c.is_available,
        "features": list(c.features or []),
        "maintenance_windows": [maintenance_to_dict(w) for w in c.maintenance_windows],
        "created_at": _iso(c.created_at),
    }


def maintenance_to_dict(w):
    return {
        "id": w.id,
        "start_date": _iso(w.start_date),
        "end_date": _iso(w.end_date),
        "reason": w.reason,
    }


def time_slot_to_dict(s):
    return {
        "id": s.id,
        "day": s.day,
        "start_time": s.start_time,
        "end_time": s.end_time,
        "price": s.price,
        "is_available": s.is_available,
        "is_special_price": s.is_special_price,
    }


def booking_to_dict(b):
    return {
        "id": b.id,
        "user_id": b.user_id,
        "court_id": b.court_id,
        "court_name": b.court.name if b.court else None,
        "date": _iso(b.date),
        "start_time": b.start_time,
        "end_time": b.end_time,
        "duration": b.duration,
        "price": b.price,
        "number_of_players": b.number_of_players,
        "equipment": b.equipment,
        "status": b.status,
        "payment_status": b.payment_status,
        "payment_method": b.payment_method,
        "notes": b.notes,
        "cancellation_reason": b.cancellation_reason,
        "cancelled_at": _iso(b.cancelled_at),
        "created_at": _iso(b.created_at),
    }

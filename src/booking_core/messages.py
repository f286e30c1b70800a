from booking_core.models import Booking

# Client-facing texts by message kind
TEMPLATES = {
    "confirmation": lambda b, ctx: (
        "✅ Booking confirmed!\n"
        f"Hi {b.client_name}, your {b.style} ({b.length}) appointment is confirmed.\n"
        f"📅 {b.date}\n"
        f"🕒 {b.time}"
    ),
    "reminder": lambda b, ctx: (
        "⏰ Reminder\n"
        f"Hi {b.client_name}, your {b.style} ({b.length}) appointment is in "
        f"{ctx.get('lead_hours', 5)} hours.\n"
        f"📅 {b.date}\n"
        f"🕒 {b.time}"
    ),
}


def build_message(kind: str, booking: Booking, **ctx) -> str:
    if kind not in TEMPLATES:
        raise ValueError(f"Unsupported message kind: {kind}")
    return TEMPLATES[kind](booking, ctx)

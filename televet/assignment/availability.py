"""Doctor availability checks.

A doctor is open for a kind of work when the current weekday is one of their
``days_available`` and the current time of day (minute precision) lies inside
the matching start/end window, both ends inclusive.
"""

from datetime import datetime, time

CONSULTATION = 'consultation'
APPOINTMENT = 'appointment'

WEEKDAY_NAMES = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')


def weekday_name(moment: datetime) -> str:
    return WEEKDAY_NAMES[moment.weekday()]


def to_minute(value: time) -> time:
    return value.replace(second=0, microsecond=0)


def working_window(settings, kind: str) -> tuple[time, time]:
    if kind == CONSULTATION:
        return settings.consultation_start_time, settings.consultation_end_time
    if kind == APPOINTMENT:
        return settings.appointment_start_time, settings.appointment_end_time
    raise ValueError(f'Unknown work kind: {kind}')


def is_within_window(value: time, start: time, end: time) -> bool:
    return start <= value <= end


def is_available_on(settings, moment: datetime) -> bool:
    available_days = {day.strip().lower() for day in settings.days_available or []}
    return weekday_name(moment).lower() in available_days


def unavailability_reason(settings, now: datetime, kind: str) -> str | None:
    """Explain why the doctor is closed for ``kind`` at ``now``, or None if open."""
    start, end = working_window(settings, kind)

    if not is_available_on(settings, now):
        return f'not available on {weekday_name(now)}'

    if not is_within_window(to_minute(now.time()), start, end):
        return (
            f'outside {kind} hours '
            f'({start.strftime("%H:%M")}-{end.strftime("%H:%M")}, now {now.strftime("%H:%M")})'
        )

    return None


def is_available(settings, now: datetime, kind: str) -> bool:
    return unavailability_reason(settings, now, kind) is None


def remaining_consultation_slots(settings, assigned_today: int) -> int:
    return max(0, settings.max_consultations_per_day - assigned_today)

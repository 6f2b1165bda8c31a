from datetime import datetime, timedelta

URGENT_KEYWORDS = ('severe', 'emergency', 'critical', 'urgent', 'bleeding', 'pain', 'vomiting', 'lethargy')

HIGH_URGENCY_WINDOW = timedelta(hours=2)
MEDIUM_URGENCY_WINDOW = timedelta(hours=12)


def has_urgent_symptoms(symptoms: str | None) -> bool:
    lowered = (symptoms or '').lower()
    return any(keyword in lowered for keyword in URGENT_KEYWORDS)


def urgency_level(symptoms: str | None, created_at: datetime, now: datetime) -> str:
    """Rough triage label shown to admins. Never used to order assignment."""
    age = now - created_at
    if has_urgent_symptoms(symptoms) or age < HIGH_URGENCY_WINDOW:
        return 'high'
    if age < MEDIUM_URGENCY_WINDOW:
        return 'medium'
    return 'low'

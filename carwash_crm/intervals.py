"""
Работа с временными интервалами записей.

Все интервалы полуоткрытые: [start, end). Две записи, одна из которых
заканчивается ровно в момент начала другой, не пересекаются.
"""
from datetime import date, datetime, timedelta, timezone

from carwash_crm.config import get_settings
from carwash_crm.errors import ValidationError


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    return start_a < end_b and start_b < end_a


def appointment_duration() -> timedelta:
    return timedelta(minutes=get_settings().APPOINTMENT_DURATION_MINUTES)


def appointment_window(start: datetime) -> tuple[datetime, datetime]:
    return start, start + appointment_duration()


def local_timezone() -> timezone:
    return timezone(timedelta(hours=get_settings().UTC_OFFSET_HOURS))


def local_now() -> datetime:
    # Время мойки без tzinfo, как и все даты в хранилище
    return datetime.now(local_timezone()).replace(tzinfo=None)


def to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(local_timezone()).replace(tzinfo=None)


def parse_datetime(raw: str, field: str = "dateTime") -> datetime:
    try:
        value = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Некорректное значение {field}: {raw}")
    return to_local_naive(value)


def parse_date(raw: str, field: str = "date") -> date:
    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        raise ValidationError(f"Некорректная дата {field}: {raw}")

import calendar
from collections import Counter
from datetime import date, datetime, timedelta
from typing import List

from carwash_crm import schemas
from carwash_crm.intervals import local_now

Status = schemas.AppointmentStatus

SEARCH_LIMIT = 10


def _month_ago(day: date) -> date:
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def build_stats(store) -> schemas.DashboardStats:
    today = local_now().date()
    week_ago = datetime.combine(today - timedelta(days=7), datetime.min.time())
    month_ago = datetime.combine(_month_ago(today), datetime.min.time())

    completed = [a for a in store.appointments if a.status == Status.COMPLETED]
    completed_today = [a for a in completed if a.date_time.date() == today]

    return schemas.DashboardStats(
        revenue_today=sum(a.price for a in completed_today),
        revenue_week=sum(a.price for a in completed if a.date_time >= week_ago),
        revenue_month=sum(a.price for a in completed if a.date_time >= month_ago),
        completed_today=len(completed_today),
        active_week=len([
            a for a in store.appointments
            if a.date_time >= week_ago and a.status != Status.CANCELLED
        ]),
        total_appointments=len(store.appointments),
        total_clients=len(store.clients),
        total_cars=len(store.cars),
    )


def build_charts(store) -> schemas.DashboardCharts:
    today = local_now().date()

    # Записи за последние 7 дней, включая сегодня
    daily = []
    for i in range(6, -1, -1):
        day = today - timedelta(days=i)
        daily.append(schemas.DailyCount(
            date=day.strftime("%d.%m"),
            count=len([a for a in store.appointments if a.date_time.date() == day]),
        ))

    service_names = {s.id: s.name for s in store.services}
    counts = Counter(
        service_names[a.service_id] for a in store.appointments if a.service_id in service_names
    )
    top_services = [schemas.ServiceCount(name=name, count=count) for name, count in counts.most_common(5)]

    return schemas.DashboardCharts(daily=daily, top_services=top_services)


def search(store, query: str) -> List[schemas.SearchResult]:
    query = (query or "").strip().lower()
    if not query:
        return []

    results = []
    for client in store.clients:
        if query in client.name.lower() or query in (client.phone or "").lower():
            results.append(_result("client", client, client.name))
    for car in store.cars:
        if query in car.plate.lower():
            results.append(_result("car", car, f"{car.plate} — {car.brand} {car.model}"))
    for service in store.services:
        if query in service.name.lower():
            results.append(_result("service", service, service.name))

    return results[:SEARCH_LIMIT]


def _result(kind, record, text) -> schemas.SearchResult:
    return schemas.SearchResult(
        type=kind,
        id=record.id,
        text=text,
        entity=record.model_dump(mode="json", by_alias=True),
    )

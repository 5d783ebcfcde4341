"""Booking report: filtering and CSV export."""
from __future__ import annotations

import csv
import io
from datetime import date
from typing import Iterable, List, Optional

from .schemas import Booking, ReportFilters, ReportRow
from .store import DirectoryStore

CSV_HEADER = "Professor,Email,Recurso,Data,Horário,Finalidade,Status"


def _matches(row: ReportRow, filters: ReportFilters) -> bool:
    if filters.professor and filters.professor.lower() not in row.professor.lower():
        return False
    if filters.resource_type != "all" and (row.resource_type is None or row.resource_type.value != filters.resource_type):
        return False
    if filters.status != "all" and row.status.value != filters.status:
        return False
    if filters.date_from and row.date < filters.date_from:
        return False
    if filters.date_to and row.date > filters.date_to:
        return False
    return True


def _to_row(store: DirectoryStore, booking: Booking) -> ReportRow:
    professor = store.find_professor_by_id(booking.professor_id)
    resource = store.find_resource_by_id(booking.resource_id)
    return ReportRow(
        professor=professor.name if professor else (booking.professor_name or ""),
        email=professor.email if professor else "",
        resource=resource.name if resource else (booking.resource_name or booking.resource_id),
        resource_type=resource.type if resource else None,
        date=booking.date,
        start_time=booking.start_time,
        end_time=booking.end_time,
        purpose=booking.purpose,
        status=booking.status,
    )


def build_report_rows(store: DirectoryStore, filters: Optional[ReportFilters] = None) -> List[ReportRow]:
    filters = filters or ReportFilters()
    rows = [_to_row(store, booking) for booking in store.list_bookings()]
    matching = [row for row in rows if _matches(row, filters)]
    return sorted(matching, key=lambda row: (row.date, row.start_time))


def export_csv(rows: Iterable[ReportRow]) -> str:
    """Render rows under the fixed header, every value double-quoted, no trailing newline."""

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow(
            [
                row.professor,
                row.email,
                row.resource,
                row.date,
                f"{row.start_time}-{row.end_time}",
                row.purpose,
                row.status.value,
            ]
        )
    body = buffer.getvalue().rstrip("\n")
    return f"{CSV_HEADER}\n{body}" if body else CSV_HEADER


def report_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"relatorio-agendamentos-{today.isoformat()}.csv"

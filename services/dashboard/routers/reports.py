from typing import List

from fastapi import APIRouter, Depends, Query, Response

from escola.dependencies import get_current_identity, get_store
from escola.reports import build_report_rows, export_csv, report_filename
from escola.schemas import Identity, ReportFilters, ReportRow
from escola.store import DirectoryStore

router = APIRouter(prefix="/reports", tags=["reports"])


def report_filters(
    professor: str = "",
    resource_type: str = Query("all", alias="resourceType"),
    status: str = "all",
    date_from: str = Query("", alias="dateFrom"),
    date_to: str = Query("", alias="dateTo"),
) -> ReportFilters:
    return ReportFilters(
        professor=professor,
        resource_type=resource_type,
        status=status,
        date_from=date_from,
        date_to=date_to,
    )


@router.get("/bookings", response_model=List[ReportRow])
def booking_report(
    filters: ReportFilters = Depends(report_filters),
    _: Identity = Depends(get_current_identity),
    store: DirectoryStore = Depends(get_store),
) -> List[ReportRow]:
    return build_report_rows(store, filters)


@router.get("/bookings.csv")
def booking_report_csv(
    filters: ReportFilters = Depends(report_filters),
    _: Identity = Depends(get_current_identity),
    store: DirectoryStore = Depends(get_store),
) -> Response:
    content = export_csv(build_report_rows(store, filters))
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{report_filename()}"'},
    )

from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response

from app.api.deps import get_commission_service
from app.api.errors import to_http_exception
from app.core.exceptions import CommissionError
from app.schemas.commission import (
    CollectionResult,
    CommissionCollectRequest,
    CommissionReportResponse,
    CommissionSummary,
    ReportGenerateRequest,
    ReportStatusUpdate,
)
from app.services.commission_service import CommissionService

router = APIRouter()

@router.post("/reports", response_model=CommissionReportResponse, status_code=status.HTTP_201_CREATED)
async def generate_report(
    request: ReportGenerateRequest,
    service: CommissionService = Depends(get_commission_service)
):
    """Generate and save a commission report for a period"""
    try:
        report = await service.generate_commission_report(
            request.period, request.start_date, request.end_date
        )
    except CommissionError as exc:
        raise to_http_exception(exc)
    return CommissionReportResponse.model_validate(report)

@router.get("/reports", response_model=List[CommissionReportResponse])
async def list_reports(service: CommissionService = Depends(get_commission_service)):
    """List saved commission reports, newest first"""
    try:
        reports = await service.get_commission_reports()
    except CommissionError as exc:
        raise to_http_exception(exc)
    return [CommissionReportResponse.model_validate(report) for report in reports]

@router.get("/reports/{report_id}", response_model=CommissionReportResponse)
async def get_report(
    report_id: str,
    service: CommissionService = Depends(get_commission_service)
):
    """Get a commission report by ID"""
    try:
        report = await service.get_commission_report(report_id)
    except CommissionError as exc:
        raise to_http_exception(exc)
    return CommissionReportResponse.model_validate(report)

@router.patch("/reports/{report_id}/status", response_model=CommissionReportResponse)
async def update_report_status(
    report_id: str,
    request: ReportStatusUpdate,
    service: CommissionService = Depends(get_commission_service)
):
    """Move a report to Reviewed or Processed"""
    try:
        report = await service.update_report_status(report_id, request.report_status)
    except CommissionError as exc:
        raise to_http_exception(exc)
    return CommissionReportResponse.model_validate(report)

@router.get("/reports/{report_id}/export")
async def export_report(
    report_id: str,
    service: CommissionService = Depends(get_commission_service)
):
    """Download a commission report as CSV"""
    try:
        content = await service.export_commission_report(report_id)
    except CommissionError as exc:
        raise to_http_exception(exc)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{report_id}.csv"'}
    )

@router.get("/summary", response_model=CommissionSummary)
async def get_summary(
    period: str = "monthly",
    service: CommissionService = Depends(get_commission_service)
):
    """Collected and pending commissions with period-over-period growth"""
    try:
        return await service.get_commission_summary(period)
    except CommissionError as exc:
        raise to_http_exception(exc)

@router.post("/collect", response_model=List[CollectionResult])
async def collect_commissions(
    request: CommissionCollectRequest,
    service: CommissionService = Depends(get_commission_service)
):
    """Mark commissions as collected; one result per payment ID"""
    return await service.collect_commissions(request.payment_ids)

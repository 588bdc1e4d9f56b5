from fastapi import Depends

from app.core.config import settings
from app.db.mongo import get_db
from app.repositories.account_repo import AccountRepository
from app.repositories.base import AccountLookup, PaymentStore, ReportStore
from app.repositories.memory_repo import memory_backend
from app.repositories.payment_repo import PaymentRepository
from app.repositories.report_repo import CommissionReportRepository
from app.services.commission_service import CommissionService
from app.services.payment_service import PaymentService


def _use_memory() -> bool:
    return settings.STORAGE_BACKEND == "memory"


def get_payment_store() -> PaymentStore:
    if _use_memory():
        return memory_backend.payments
    return PaymentRepository(get_db())


def get_report_store() -> ReportStore:
    if _use_memory():
        return memory_backend.reports
    return CommissionReportRepository(get_db())


def get_account_lookup() -> AccountLookup:
    if _use_memory():
        return memory_backend.accounts
    return AccountRepository(get_db())


def get_payment_service(payments: PaymentStore = Depends(get_payment_store)) -> PaymentService:
    return PaymentService(payments, commission_rate=settings.COMMISSION_RATE)


def get_commission_service(
    payments: PaymentStore = Depends(get_payment_store),
    reports: ReportStore = Depends(get_report_store),
    accounts: AccountLookup = Depends(get_account_lookup)
) -> CommissionService:
    return CommissionService(payments, reports, accounts, currency=settings.CURRENCY)

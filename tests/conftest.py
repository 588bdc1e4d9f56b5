from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_account_lookup, get_payment_store, get_report_store
from app.main import app
from app.models.account import AccountType, OwnerAccount
from app.models.base import generate_id
from app.models.payment import CommissionStatus, Payment, PaymentMethod, PaymentStatus
from app.repositories.memory_repo import (
    InMemoryAccountDirectory,
    InMemoryPaymentStore,
    InMemoryReportStore,
)
from app.services.commission_service import CommissionService
from app.services.payment_service import PaymentService
from app.utils.commission_math import calculate_commission

# Friday 15 March 2024, mid-morning UTC
FIXED_NOW = datetime(2024, 3, 15, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def payment_store():
    return InMemoryPaymentStore()


@pytest.fixture
def report_store():
    return InMemoryReportStore()


@pytest.fixture
def accounts():
    """Owner directory with one municipal and one establishment owner."""
    return InMemoryAccountDirectory([
        OwnerAccount(id="muni1", account_type=AccountType.MUNICIPAL, business_name="City Parking Authority"),
        OwnerAccount(id="est1", account_type=AccountType.ESTABLISHMENT, business_name="Downtown Mall, Inc."),
        OwnerAccount(id="driver1", account_type=AccountType.DRIVER, contact_person="Juan Dela Cruz"),
    ])


@pytest.fixture
def payment_service(payment_store, clock):
    return PaymentService(payment_store, commission_rate=Decimal("0.10"), clock=clock)


@pytest.fixture
def commission_service(payment_store, report_store, accounts, clock):
    return CommissionService(payment_store, report_store, accounts, clock=clock, currency="PHP")


@pytest.fixture
def make_payment():
    """Build a valid payment record without going through the service."""
    def _make(
        gross_amount_cents: int = 10000,
        owner_account_id: str = "muni1",
        created_at: datetime = FIXED_NOW,
        commission_status: CommissionStatus = CommissionStatus.PENDING,
        payment_status: PaymentStatus = PaymentStatus.COMPLETED,
        rate: Decimal = Decimal("0.10"),
    ) -> Payment:
        split = calculate_commission(gross_amount_cents, rate)
        return Payment(
            id=generate_id("PAY"),
            invoice_id=generate_id("INV"),
            driver_id="driver1",
            parking_slot_id="slot1",
            owner_account_id=owner_account_id,
            gross_amount_cents=gross_amount_cents,
            commission_rate=rate,
            commission_amount_cents=split.commission_amount_cents,
            net_amount_cents=split.net_amount_cents,
            payment_method=PaymentMethod.GCASH,
            payment_status=payment_status,
            transaction_id=generate_id("TXN"),
            commission_status=commission_status,
            created_at=created_at,
            updated_at=created_at,
        )
    return _make


@pytest.fixture
def sample_payment_data():
    return {
        "invoice_id": "INV_001",
        "driver_id": "driver1",
        "parking_slot_id": "slot1",
        "owner_account_id": "muni1",
        "gross_amount_cents": 10000,
        "payment_method": "GCash",
        "transaction_id": "TXN_0001",
    }


@pytest.fixture
def mock_db():
    """Stand-in for an AsyncIOMotorDatabase; each collection is a MagicMock with async methods."""
    collections = {}

    def _collection(name):
        if name not in collections:
            collection = MagicMock(name=name)
            collection.insert_one = AsyncMock()
            collection.find_one = AsyncMock(return_value=None)
            collection.find_one_and_update = AsyncMock(return_value=None)
            collection.create_index = AsyncMock()
            collections[name] = collection
        return collections[name]

    db = MagicMock()
    db.__getitem__.side_effect = _collection
    return db


@pytest.fixture
def client(payment_store, report_store, accounts):
    """TestClient wired to in-memory stores (lifespan, and so MongoDB, is not started)."""
    app.dependency_overrides[get_payment_store] = lambda: payment_store
    app.dependency_overrides[get_report_store] = lambda: report_store
    app.dependency_overrides[get_account_lookup] = lambda: accounts
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()

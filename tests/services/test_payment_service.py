from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from app.core.exceptions import (
    InvalidAmountError,
    InvalidTransitionError,
    NotFoundError,
    PaymentValidationError,
    PersistenceError,
)
from app.models.payment import CommissionStatus, PaymentMethod, PaymentStatus
from app.schemas.payment import PaymentCreate


@pytest.mark.asyncio
async def test_process_payment_records_commission(payment_service, payment_store, sample_payment_data, now):
    payment = await payment_service.process_payment(PaymentCreate(**sample_payment_data))

    assert payment.id.startswith("PAY_")
    assert payment.gross_amount_cents == 10000
    assert payment.commission_rate == Decimal("0.10")
    assert payment.commission_amount_cents == 1000
    assert payment.net_amount_cents == 9000
    assert payment.payment_method == PaymentMethod.GCASH
    assert payment.payment_status == PaymentStatus.COMPLETED
    assert payment.commission_status == CommissionStatus.PENDING
    assert payment.created_at == now
    assert payment.updated_at == now

    stored = await payment_store.get(payment.id)
    assert stored == payment


@pytest.mark.asyncio
async def test_process_payment_strips_identifiers(payment_service, sample_payment_data):
    sample_payment_data["owner_account_id"] = "  muni1 "

    payment = await payment_service.process_payment(PaymentCreate(**sample_payment_data))

    assert payment.owner_account_id == "muni1"


@pytest.mark.asyncio
async def test_each_payment_gets_its_own_id(payment_service, payment_store, sample_payment_data):
    first = await payment_service.process_payment(PaymentCreate(**sample_payment_data))
    second = await payment_service.process_payment(PaymentCreate(**sample_payment_data))

    assert first.id != second.id
    assert len(await payment_store.query_by_owner("muni1")) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("gross", [0, -100, -1])
async def test_non_positive_amount_is_rejected_and_not_saved(payment_service, payment_store, sample_payment_data, gross):
    sample_payment_data["gross_amount_cents"] = gross

    with pytest.raises(InvalidAmountError) as exc_info:
        await payment_service.process_payment(PaymentCreate(**sample_payment_data))

    assert exc_info.value.field == "gross_amount_cents"
    assert await payment_store.query_by_owner("muni1") == []


@pytest.mark.asyncio
async def test_missing_transaction_id_is_rejected(payment_service, payment_store, sample_payment_data):
    del sample_payment_data["transaction_id"]

    with pytest.raises(PaymentValidationError) as exc_info:
        await payment_service.process_payment(PaymentCreate(**sample_payment_data))

    assert exc_info.value.field == "transaction_id"
    assert await payment_store.query_by_owner("muni1") == []


@pytest.mark.parametrize("field", ["invoice_id", "driver_id", "parking_slot_id", "owner_account_id", "transaction_id"])
def test_validate_payment_data_names_the_blank_field(payment_service, sample_payment_data, field):
    sample_payment_data[field] = "   "

    with pytest.raises(PaymentValidationError) as exc_info:
        payment_service.validate_payment_data(PaymentCreate(**sample_payment_data))

    assert exc_info.value.field == field


def test_validate_payment_data_rejects_unknown_method(payment_service, sample_payment_data):
    sample_payment_data["payment_method"] = "Bitcoin"

    with pytest.raises(PaymentValidationError) as exc_info:
        payment_service.validate_payment_data(PaymentCreate(**sample_payment_data))

    assert exc_info.value.field == "payment_method"


@pytest.mark.parametrize("method", ["GCash", "Credit Card", "Prepaid"])
def test_validate_payment_data_accepts_known_methods(payment_service, sample_payment_data, method):
    sample_payment_data["payment_method"] = method

    payment_service.validate_payment_data(PaymentCreate(**sample_payment_data))


@pytest.mark.asyncio
async def test_persistence_failure_propagates(payment_service, payment_store, sample_payment_data):
    payment_store.append = AsyncMock(side_effect=PersistenceError("Failed to save payment"))

    with pytest.raises(PersistenceError):
        await payment_service.process_payment(PaymentCreate(**sample_payment_data))

    payment_store.append.assert_called_once()


def test_calculate_commission_preview(payment_service):
    split = payment_service.calculate_commission(10000)

    assert split.commission_amount_cents == 1000
    assert split.net_amount_cents == 9000


def test_calculate_commission_preview_rejects_negative(payment_service):
    with pytest.raises(InvalidAmountError):
        payment_service.calculate_commission(-500)


@pytest.mark.asyncio
async def test_refund_completed_payment(payment_service, payment_store, make_payment):
    payment = make_payment(gross_amount_cents=5000)
    await payment_store.append(payment)

    refunded = await payment_service.refund_payment(payment.id)

    assert refunded.payment_status == PaymentStatus.REFUNDED
    assert refunded.gross_amount_cents == 5000
    assert refunded.commission_amount_cents == payment.commission_amount_cents
    assert (await payment_store.get(payment.id)).payment_status == PaymentStatus.REFUNDED


@pytest.mark.asyncio
async def test_refund_twice_is_an_invalid_transition(payment_service, payment_store, make_payment):
    payment = make_payment(payment_status=PaymentStatus.REFUNDED)
    await payment_store.append(payment)

    with pytest.raises(InvalidTransitionError):
        await payment_service.refund_payment(payment.id)


@pytest.mark.asyncio
async def test_refund_unknown_payment(payment_service):
    with pytest.raises(NotFoundError):
        await payment_service.refund_payment("PAY_missing")


@pytest.mark.asyncio
async def test_payment_summary_for_owner_in_current_month(payment_service, payment_store, make_payment, now):
    await payment_store.append(make_payment(10000, "muni1", created_at=now))
    await payment_store.append(make_payment(20000, "muni1", created_at=now - timedelta(days=3)))
    # previous month, and another owner
    await payment_store.append(make_payment(50000, "muni1", created_at=datetime(2024, 2, 28, tzinfo=timezone.utc)))
    await payment_store.append(make_payment(70000, "est1", created_at=now))

    summary = await payment_service.get_payment_summary("muni1", "monthly")

    assert summary.transaction_count == 2
    assert summary.total_gross_revenue_cents == 30000
    assert summary.total_commissions_cents == 3000
    assert summary.total_net_revenue_cents == 27000
    assert summary.start_date == datetime(2024, 3, 1, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_payment_summary_leaves_out_refunds(payment_service, payment_store, make_payment, now):
    kept = make_payment(10000, "muni1", created_at=now)
    refunded = make_payment(40000, "muni1", created_at=now)
    await payment_store.append(kept)
    await payment_store.append(refunded)
    await payment_service.refund_payment(refunded.id)

    summary = await payment_service.get_payment_summary("muni1")

    assert summary.transaction_count == 1
    assert summary.total_gross_revenue_cents == 10000


@pytest.mark.parametrize("gross", [True, 10.5, "10000", None])
def test_validate_payment_data_rejects_non_integer_amounts(payment_service, sample_payment_data, gross):
    sample_payment_data["gross_amount_cents"] = gross

    with pytest.raises(InvalidAmountError):
        payment_service.validate_payment_data(PaymentCreate(**sample_payment_data))

from datetime import timedelta

import pytest

from app.core.exceptions import PersistenceError
from app.models.payment import CommissionStatus, PaymentStatus
from app.repositories.memory_repo import InMemoryPaymentStore


@pytest.mark.asyncio
async def test_append_is_idempotent_for_the_same_payment(make_payment):
    store = InMemoryPaymentStore()
    payment = make_payment()

    await store.append(payment)
    await store.append(payment)

    assert await store.query_by_owner("muni1") == [payment]


@pytest.mark.asyncio
async def test_append_rejects_id_reuse(make_payment):
    store = InMemoryPaymentStore()
    payment = make_payment(10000)
    await store.append(payment)

    with pytest.raises(PersistenceError):
        await store.append(make_payment(5000).model_copy(update={"id": payment.id}))


@pytest.mark.asyncio
async def test_range_query_is_half_open_and_sorted(make_payment, now):
    store = InMemoryPaymentStore()
    later = make_payment(created_at=now + timedelta(minutes=5))
    earlier = make_payment(created_at=now)
    outside = make_payment(created_at=now + timedelta(hours=1))
    for payment in (later, earlier, outside):
        await store.append(payment)

    result = await store.query_by_created_range(now, now + timedelta(hours=1))

    assert result == [earlier, later]


@pytest.mark.asyncio
async def test_update_status_compare_and_set(make_payment):
    store = InMemoryPaymentStore()
    payment = make_payment()
    await store.append(payment)

    stale = await store.update_status(
        payment.id, "commission_status", CommissionStatus.PAID, expected=CommissionStatus.COLLECTED
    )
    moved = await store.update_status(
        payment.id, "payment_status", PaymentStatus.REFUNDED, expected=PaymentStatus.COMPLETED
    )

    assert stale is None
    assert moved.payment_status == PaymentStatus.REFUNDED
    assert moved.gross_amount_cents == payment.gross_amount_cents
    assert (await store.get(payment.id)).commission_status == CommissionStatus.PENDING


@pytest.mark.asyncio
async def test_update_status_only_touches_status_fields(make_payment):
    store = InMemoryPaymentStore()
    payment = make_payment()
    await store.append(payment)

    with pytest.raises(ValueError):
        await store.update_status(payment.id, "net_amount_cents", 0)

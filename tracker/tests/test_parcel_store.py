"""
Tests for ParcelStore.

Covers add/get/delete, the status gate on address changes and deletion,
status overwrites and lookups by client.
"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from tracker.app.core.exceptions import NoRowsAffectedError, ParcelNotFoundError
from tracker.app.db.session import Base
from tracker.app.models.parcel_enums import ParcelStatus
from tracker.app.schemas.parcel import ParcelRead


@pytest.mark.asyncio
async def test_add_get_delete(store, make_parcel):
    """A registered parcel can be stored, read back and deleted."""
    parcel = make_parcel()

    number = await store.add(parcel)
    assert number

    stored = await store.get(number)
    assert stored == ParcelRead(number=number, **parcel.model_dump())

    await store.delete(number)

    with pytest.raises(ParcelNotFoundError) as exc_info:
        await store.get(number)
    assert exc_info.value.number == number


@pytest.mark.asyncio
async def test_add_assigns_distinct_numbers(store, make_parcel):
    first = await store.add(make_parcel())
    second = await store.add(make_parcel())

    assert first != second


@pytest.mark.asyncio
async def test_get_missing_parcel(store):
    with pytest.raises(ParcelNotFoundError):
        await store.get(424242)


@pytest.mark.asyncio
async def test_set_address(store, make_parcel):
    """Address changes while registered, and is locked once sent."""
    number = await store.add(make_parcel())

    await store.set_address(number, "new test address")
    assert (await store.get(number)).address == "new test address"

    await store.set_status(number, ParcelStatus.SENT.value)

    with pytest.raises(NoRowsAffectedError) as exc_info:
        await store.set_address(number, "new test address on sent parcel")
    assert exc_info.value.operation == "set_address"

    assert (await store.get(number)).address == "new test address"


@pytest.mark.asyncio
async def test_set_address_delivered_parcel(store, make_parcel):
    number = await store.add(make_parcel(status=ParcelStatus.DELIVERED.value))

    with pytest.raises(NoRowsAffectedError):
        await store.set_address(number, "elsewhere")

    assert (await store.get(number)).address == "test"


@pytest.mark.asyncio
async def test_set_address_missing_parcel(store):
    with pytest.raises(NoRowsAffectedError):
        await store.set_address(424242, "nowhere")


@pytest.mark.asyncio
async def test_set_status(store, make_parcel):
    number = await store.add(make_parcel())

    await store.set_status(number, ParcelStatus.DELIVERED.value)

    assert (await store.get(number)).status == ParcelStatus.DELIVERED.value


@pytest.mark.asyncio
async def test_set_status_accepts_any_value(store, make_parcel):
    """Status is not checked against the known lifecycle values."""
    number = await store.add(make_parcel())

    await store.set_status(number, "lost in transit")
    assert (await store.get(number)).status == "lost in transit"

    # Going backwards is allowed as well
    await store.set_status(number, ParcelStatus.REGISTERED.value)
    await store.set_address(number, "reopened")
    assert (await store.get(number)).address == "reopened"


@pytest.mark.asyncio
async def test_set_status_same_value_still_matches(store, make_parcel):
    number = await store.add(make_parcel())

    await store.set_status(number, ParcelStatus.REGISTERED.value)

    assert (await store.get(number)).status == ParcelStatus.REGISTERED.value


@pytest.mark.asyncio
async def test_advance_status(store, make_parcel):
    number = await store.add(make_parcel())

    await store.advance_status(number, ParcelStatus.REGISTERED.value, ParcelStatus.SENT.value)

    assert (await store.get(number)).status == ParcelStatus.SENT.value


@pytest.mark.asyncio
async def test_advance_status_from_wrong_status(store, make_parcel):
    """The status is only replaced while it still has the expected value."""
    number = await store.add(make_parcel(status=ParcelStatus.DELIVERED.value))

    with pytest.raises(NoRowsAffectedError) as exc_info:
        await store.advance_status(number, ParcelStatus.REGISTERED.value, ParcelStatus.SENT.value)
    assert exc_info.value.operation == "advance_status"

    assert (await store.get(number)).status == ParcelStatus.DELIVERED.value


@pytest.mark.asyncio
async def test_advance_status_missing_parcel(store):
    with pytest.raises(NoRowsAffectedError):
        await store.advance_status(424242, ParcelStatus.REGISTERED.value, ParcelStatus.SENT.value)


@pytest.mark.asyncio
async def test_set_status_missing_parcel(store):
    """Overwriting the status of an unknown parcel reports no rows modified."""
    with pytest.raises(NoRowsAffectedError) as exc_info:
        await store.set_status(424242, ParcelStatus.SENT.value)
    assert exc_info.value.operation == "set_status"
    assert exc_info.value.number == 424242


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [ParcelStatus.SENT.value, ParcelStatus.DELIVERED.value])
async def test_delete_refused_after_registration(store, make_parcel, status):
    number = await store.add(make_parcel())
    await store.set_status(number, status)

    with pytest.raises(NoRowsAffectedError) as exc_info:
        await store.delete(number)
    assert exc_info.value.operation == "delete"

    stored = await store.get(number)
    assert stored.status == status


@pytest.mark.asyncio
async def test_delete_missing_parcel(store):
    with pytest.raises(NoRowsAffectedError):
        await store.delete(424242)


@pytest.mark.asyncio
async def test_delete_twice(store, make_parcel):
    number = await store.add(make_parcel())
    await store.delete(number)

    with pytest.raises(NoRowsAffectedError):
        await store.delete(number)


@pytest.mark.asyncio
async def test_get_by_client(store, make_parcel, rng):
    """Only the client's parcels come back, whatever else is stored."""
    client_id = rng.randint(1, 10_000_000)
    other_client = client_id + 1

    await store.add(make_parcel(client=other_client))

    parcels = {}
    for i in range(3):
        parcel = make_parcel(client=client_id, address=f"address {i}")
        number = await store.add(parcel)
        parcels[number] = ParcelRead(number=number, **parcel.model_dump())
        await store.add(make_parcel(client=other_client))

    stored = await store.get_by_client(client_id)

    assert len(stored) == len(parcels)
    for parcel in stored:
        assert parcel.number in parcels
        assert parcel == parcels[parcel.number]


@pytest.mark.asyncio
async def test_get_by_client_without_parcels(store, rng):
    assert await store.get_by_client(rng.randint(1, 10_000_000)) == []


@pytest.mark.asyncio
async def test_scenario(store, make_parcel):
    """Full lifecycle: edit while registered, then locked once sent."""
    parcel = make_parcel(client=1000, address="test")
    number = await store.add(parcel)

    stored = await store.get(number)
    assert stored.number == number
    assert stored.client == 1000
    assert stored.status == ParcelStatus.REGISTERED.value
    assert stored.address == "test"
    assert stored.created_at == parcel.created_at

    await store.set_address(number, "new address")
    assert (await store.get(number)).address == "new address"

    await store.set_status(number, ParcelStatus.SENT.value)

    with pytest.raises(NoRowsAffectedError):
        await store.set_address(number, "blocked")
    assert (await store.get(number)).address == "new address"

    with pytest.raises(NoRowsAffectedError):
        await store.delete(number)
    assert (await store.get(number)).number == number


@pytest.mark.asyncio
async def test_storage_failure_propagates(engine, store):
    """Errors from the database are raised as they are, not reclassified."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    with pytest.raises(OperationalError):
        await store.get(1)


@pytest.mark.asyncio
async def test_constraint_violation_rolls_back(store, db_session, make_parcel, mocker):
    """A failed write is rolled back and the original error re-raised."""
    rollback = mocker.spy(db_session, "rollback")
    parcel = make_parcel()

    mocker.patch.object(
        db_session,
        "execute",
        side_effect=IntegrityError("INSERT INTO parcel", {}, Exception("NOT NULL constraint failed")),
    )

    with pytest.raises(IntegrityError):
        await store.add(parcel)
    assert rollback.call_count == 1


@pytest.mark.asyncio
async def test_failed_update_is_not_reported_as_no_rows(store, db_session, mocker):
    mocker.patch.object(
        db_session,
        "execute",
        side_effect=OperationalError("UPDATE parcel", {}, Exception("database is locked")),
    )

    with pytest.raises(OperationalError):
        await store.set_address(1, "anywhere")

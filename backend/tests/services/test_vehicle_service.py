"""Vehicle Service — query engine behaviour against a real (SQLite) store.

Invariants:
    - VIN lookups are case-insensitive; storage is canonical uppercase
    - Duplicates (up to case) yield VinConflictError, also when the pre-check is bypassed
    - Pages concatenate to the full filtered set in a stable total order
    - Update touches only provided fields and never moves updated_at backwards
    - Delete is permanent
"""

from decimal import Decimal
from uuid import UUID

import pytest

from vehicle_api.core.domain_types import FuelType
from vehicle_api.core.errors import (
    DatabaseError,
    VehicleNotFoundError,
    VinConflictError,
)
from vehicle_api.core.pagination import PageRequest, VehicleFilter


# ─── create / find ───────────────────────────────────────────────

async def test_create_assigns_id_timestamps_and_canonical_vin(service, make_vehicle_data):
    vehicle = await service.create(make_vehicle_data(vin="wvwzzz3czwe000001"))
    assert isinstance(vehicle.id, UUID)
    assert vehicle.vin == "WVWZZZ3CZWE000001"
    assert vehicle.created_at is not None
    assert vehicle.updated_at >= vehicle.created_at


async def test_create_stores_price_as_decimal(service, make_vehicle_data):
    vehicle = await service.create(make_vehicle_data(purchase_price=Decimal("32999.99")))
    assert isinstance(vehicle.purchase_price, Decimal)
    assert vehicle.purchase_price == Decimal("32999.99")


async def test_create_accepts_enum_fuel_type(service, make_vehicle_data):
    vehicle = await service.create(make_vehicle_data(fuel_type=FuelType.ELECTRIC))
    assert vehicle.fuel_type == "Electric"


@pytest.mark.parametrize("lookup", [
    "WVWZZZ3CZWE000001", "wvwzzz3czwe000001", "WvWzZz3cZwE000001",
])
async def test_find_by_vin_in_any_case(service, make_vehicle_data, lookup):
    created = await service.create(make_vehicle_data())
    found = await service.find_by_vin(lookup)
    assert found is not None
    assert found.id == created.id


async def test_find_by_vin_missing_returns_none(service):
    assert await service.find_by_vin("DOESNOTEXIST12345") is None


async def test_get_by_vin_missing_raises(service):
    with pytest.raises(VehicleNotFoundError):
        await service.get_by_vin("DOESNOTEXIST12345")


async def test_exists(service, make_vehicle_data):
    assert await service.exists("WVWZZZ3CZWE000001") is False
    await service.create(make_vehicle_data())
    assert await service.exists("wvwzzz3czwe000001") is True


# ─── uniqueness ──────────────────────────────────────────────────

async def test_duplicate_vin_up_to_case_conflicts(service, make_vehicle_data):
    await service.create(make_vehicle_data(vin="WVWZZZ3CZWE000001"))
    with pytest.raises(VinConflictError):
        await service.create(make_vehicle_data(vin="wvwzzz3czwe000001"))

    _, info = await service.list_vehicles()
    assert info.total == 1


async def test_unique_index_is_authoritative_when_precheck_misses(
    service, make_vehicle_data, monkeypatch,
):
    """Simulates a concurrent writer: the pre-check says free, the insert collides."""
    await service.create(make_vehicle_data())

    real_exists = service.exists
    calls = []

    async def racing_exists(vin):
        calls.append(vin)
        if len(calls) == 1:
            return False
        return await real_exists(vin)

    monkeypatch.setattr(service, "exists", racing_exists)

    with pytest.raises(VinConflictError):
        await service.create(make_vehicle_data(vin="wvwzzz3czwe000001"))
    assert len(calls) == 2


async def test_other_integrity_failures_are_database_errors(service, make_vehicle_data):
    """Check constraints back the schema bounds; they are not reported as conflicts."""
    with pytest.raises(DatabaseError):
        await service.create(make_vehicle_data(horse_power=5000))
    assert await service.exists("WVWZZZ3CZWE000001") is False


# ─── list: filters ───────────────────────────────────────────────

@pytest.fixture
async def fleet(service, make_vehicle_data):
    specs = [
        ("Toyota", 2019, "Hybrid"),
        ("Tesla", 2023, "Electric"),
        ("Honda", 2021, "Gasoline"),
        ("honda motors", 2018, "Diesel"),
        ("Ford", 2022, "Gasoline"),
        ("Tesla", 2021, "Electric"),
    ]
    for n, (maker, year, fuel) in enumerate(specs, start=1):
        await service.create(make_vehicle_data(
            n, manufacturer_name=maker, model_year=year, fuel_type=fuel,
        ))
    return specs


async def test_list_without_filters_returns_all(service, fleet):
    vehicles, info = await service.list_vehicles()
    assert len(vehicles) == len(fleet)
    assert info.total == len(fleet)
    assert info.total_pages == 1


async def test_filter_manufacturer_case_insensitive_substring(service, fleet):
    vehicles, info = await service.list_vehicles(
        filters=VehicleFilter(manufacturer="HON"),
    )
    assert info.total == 2
    assert {v.manufacturer_name for v in vehicles} == {"Honda", "honda motors"}


async def test_filter_manufacturer_wildcards_are_literal(service, fleet):
    _, info = await service.list_vehicles(filters=VehicleFilter(manufacturer="%"))
    assert info.total == 0


async def test_filter_fuel_type_exact(service, fleet):
    vehicles, info = await service.list_vehicles(
        filters=VehicleFilter(fuel_type=FuelType.ELECTRIC),
    )
    assert info.total == 2
    assert all(v.fuel_type == "Electric" for v in vehicles)


async def test_filter_fuel_type_without_matches(service, make_vehicle_data):
    await service.create(make_vehicle_data(fuel_type="Gasoline"))
    vehicles, info = await service.list_vehicles(
        filters=VehicleFilter(fuel_type=FuelType.ELECTRIC),
    )
    assert vehicles == []
    assert info.total == 0
    assert info.total_pages == 0


async def test_filter_year_range_inclusive(service, fleet):
    vehicles, _ = await service.list_vehicles(
        filters=VehicleFilter(year_min=2019, year_max=2021),
    )
    assert sorted(v.model_year for v in vehicles) == [2019, 2021, 2021]


async def test_filter_year_min_greater_than_max_is_empty(service, fleet):
    _, info = await service.list_vehicles(
        filters=VehicleFilter(year_min=2023, year_max=2019),
    )
    assert info.total == 0


async def test_filters_combine_with_and(service, fleet):
    vehicles, _ = await service.list_vehicles(
        filters=VehicleFilter(manufacturer="tesla", year_min=2022),
    )
    assert [(v.manufacturer_name, v.model_year) for v in vehicles] == [("Tesla", 2023)]


# ─── list: ordering & pagination ─────────────────────────────────

async def test_order_manufacturer_asc_then_year_desc(service, fleet):
    vehicles, _ = await service.list_vehicles()
    keys = [(v.manufacturer_name, v.model_year) for v in vehicles]
    assert keys[:4] == [
        ("Ford", 2022), ("Honda", 2021), ("Tesla", 2023), ("Tesla", 2021),
    ]


async def test_ties_broken_by_vin(service, make_vehicle_data):
    for n in (3, 1, 2):
        await service.create(make_vehicle_data(n))
    vehicles, _ = await service.list_vehicles()
    assert [v.vin for v in vehicles] == sorted(v.vin for v in vehicles)


@pytest.mark.parametrize("limit", [1, 3, 4, 7, 20])
async def test_pages_concatenate_to_full_set(service, make_vehicle_data, limit):
    total = 13
    for n in range(total):
        await service.create(make_vehicle_data(
            n, manufacturer_name=f"Maker {n % 3}", model_year=2000 + n % 4,
        ))

    _, first = await service.list_vehicles(PageRequest(page=1, limit=limit))
    assert first.total == total
    assert first.total_pages == -(-total // limit)

    seen = []
    for page in range(1, first.total_pages + 1):
        vehicles, _ = await service.list_vehicles(PageRequest(page=page, limit=limit))
        seen.extend(v.vin for v in vehicles)

    full, _ = await service.list_vehicles(PageRequest(page=1, limit=100))
    assert seen == [v.vin for v in full]
    assert len(set(seen)) == total


async def test_page_past_the_end_is_empty(service, make_vehicle_data):
    await service.create(make_vehicle_data())
    vehicles, info = await service.list_vehicles(PageRequest(page=5, limit=20))
    assert vehicles == []
    assert info.total == 1
    assert info.page == 5


# ─── update ──────────────────────────────────────────────────────

async def test_update_changes_only_provided_fields(service, make_vehicle_data):
    created = await service.create(make_vehicle_data(description="original"))
    before = {
        "manufacturer_name": created.manufacturer_name,
        "model_name": created.model_name,
        "model_year": created.model_year,
        "purchase_price": created.purchase_price,
        "fuel_type": created.fuel_type,
        "description": created.description,
    }
    created_at = created.created_at

    updated = await service.update("wvwzzz3czwe000001", {"horse_power": 200})

    assert updated.horse_power == 200
    assert updated.id == created.id
    assert updated.vin == "WVWZZZ3CZWE000001"
    assert updated.created_at == created_at
    for name, value in before.items():
        assert getattr(updated, name) == value


async def test_update_refreshes_updated_at(service, make_vehicle_data):
    created = await service.create(make_vehicle_data())
    previous = created.updated_at
    updated = await service.update(created.vin, {"model_name": "Passat"})
    assert updated.updated_at >= previous
    assert updated.updated_at >= updated.created_at


async def test_update_price_kept_exact(service, make_vehicle_data):
    created = await service.create(make_vehicle_data())
    updated = await service.update(created.vin, {"purchase_price": Decimal("0.10")})
    assert updated.purchase_price == Decimal("0.10")


async def test_update_ignores_vin_field(service, make_vehicle_data):
    created = await service.create(make_vehicle_data())
    updated = await service.update(created.vin, {"vin": "WVWZZZ3CZWE999999"})
    assert updated.vin == created.vin
    assert await service.find_by_vin("WVWZZZ3CZWE999999") is None


async def test_update_missing_raises_not_found(service):
    with pytest.raises(VehicleNotFoundError):
        await service.update("DOESNOTEXIST12345", {"horse_power": 200})


# ─── delete ──────────────────────────────────────────────────────

async def test_delete_then_find_is_not_found(service, make_vehicle_data):
    await service.create(make_vehicle_data())
    await service.delete("wvwzzz3czwe000001")
    assert await service.find_by_vin("WVWZZZ3CZWE000001") is None
    _, info = await service.list_vehicles()
    assert info.total == 0


async def test_delete_missing_raises_not_found(service):
    with pytest.raises(VehicleNotFoundError):
        await service.delete("DOESNOTEXIST12345")


async def test_vin_reusable_after_delete(service, make_vehicle_data):
    await service.create(make_vehicle_data())
    await service.delete("WVWZZZ3CZWE000001")
    again = await service.create(make_vehicle_data())
    assert again.vin == "WVWZZZ3CZWE000001"


async def test_page_beyond_store_range_is_empty(service, make_vehicle_data):
    await service.create(make_vehicle_data())
    vehicles, info = await service.list_vehicles(PageRequest(page=10**18, limit=100))
    assert vehicles == []
    assert info.total == 1
    assert info.total_pages == 1

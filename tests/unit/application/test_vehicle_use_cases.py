"""
Name: Vehicle Use Cases Tests

Responsibilities:
  - Verify create / update / status change / favorite / delete / restore
    workflows against in-memory stores
  - Verify the historial entries each workflow leaves behind
  - Verify audit failures never fail the workflow

Collaborators:
  - dealership.application.usecases.vehicles
  - conftest fixtures (clock, ids, stores, historial)
"""

import pytest

from dealership.application.usecases.vehicles import (
    ChangeVehicleStatusUseCase,
    CreateVehicleUseCase,
    DeleteVehicleUseCase,
    ListAvailableMakesUseCase,
    ListFavoritesUseCase,
    ListVehiclesUseCase,
    ManageFavoriteUseCase,
    RestoreVehicleUseCase,
    UpdateVehicleUseCase,
)
from dealership.crosscutting.pagination import PageRequest
from dealership.domain.audit import ActionKind, EntityType
from dealership.domain.entities import VehicleStatus
from dealership.domain.errors import (
    CapacityExceededError,
    ConflictError,
    NoOpTransitionError,
    NotFoundError,
    TerminalStateError,
    ValidationError,
)
from dealership.domain.repositories import VehicleFilters

pytestmark = pytest.mark.unit


@pytest.fixture
def create_uc(vehicle_repo, historial, clock, id_generator):
    return CreateVehicleUseCase(
        vehicle_repo, historial, clock=clock, id_generator=id_generator
    )


@pytest.fixture
def update_uc(vehicle_repo, historial, clock):
    return UpdateVehicleUseCase(vehicle_repo, historial, clock=clock)


@pytest.fixture
def status_uc(vehicle_repo, historial, clock):
    return ChangeVehicleStatusUseCase(vehicle_repo, historial, clock=clock)


@pytest.fixture
def favorite_uc(vehicle_repo, historial, clock):
    return ManageFavoriteUseCase(vehicle_repo, historial, clock=clock)


# =============================================================================
# Create
# =============================================================================


class TestCreateVehicle:
    async def test_creates_and_records(self, create_uc, vehicle_repo, audit_repo, vehicle_payload):
        vehicle = await create_uc.execute(vehicle_payload(), actor_id="admin-1")

        assert await vehicle_repo.find_by_id(vehicle.id) == vehicle
        assert vehicle.created_by == "admin-1"

        [record] = audit_repo.all()
        assert record.action_kind is ActionKind.CREATE
        assert record.entity_type is EntityType.VEHICLE
        assert record.entity_id == str(vehicle.id)
        assert record.notes == "Vehicle created: Toyota Corolla XEi - AB123CD"
        assert record.metadata["context"]["vehicle"]["plate"] == "AB123CD"

    async def test_may_start_available(self, create_uc, vehicle_payload):
        vehicle = await create_uc.execute(vehicle_payload(status="DISPONIBLE"))
        assert vehicle.status is VehicleStatus.AVAILABLE

    @pytest.mark.parametrize("status", ["RESERVADO", "VENDIDO"])
    async def test_rejects_other_initial_status(self, create_uc, vehicle_repo, vehicle_payload, status):
        with pytest.raises(ValidationError, match="must start as one of"):
            await create_uc.execute(vehicle_payload(status=status))
        assert vehicle_repo.count() == 0

    async def test_duplicate_plate_conflicts(self, create_uc, audit_repo, vehicle_payload):
        await create_uc.execute(vehicle_payload())
        with pytest.raises(ConflictError) as exc:
            await create_uc.execute(vehicle_payload(name="Otro"))
        assert exc.value.fields == ("plate",)
        assert len(audit_repo.all()) == 1

    async def test_invalid_data_is_not_persisted(self, create_uc, vehicle_repo, audit_repo, vehicle_payload):
        with pytest.raises(ValidationError):
            await create_uc.execute(vehicle_payload(price=-5))
        assert vehicle_repo.count() == 0
        assert audit_repo.all() == []

    async def test_audit_failure_does_not_fail_creation(
        self, vehicle_repo, failing_historial, failing_audit_repo, clock, id_generator, vehicle_payload
    ):
        use_case = CreateVehicleUseCase(
            vehicle_repo, failing_historial, clock=clock, id_generator=id_generator
        )
        vehicle = await use_case.execute(vehicle_payload())

        assert await vehicle_repo.find_by_id(vehicle.id) is not None
        assert failing_audit_repo.attempts == 1
        assert failing_audit_repo.all() == []


# =============================================================================
# Update
# =============================================================================


class TestUpdateVehicle:
    async def test_one_record_per_changed_field(self, update_uc, stored_vehicle, audit_repo, clock):
        vehicle = await stored_vehicle()
        clock.advance(hours=1)

        result = await update_uc.execute(
            vehicle.id,
            {"price": 26500.0, "mileage": 35000, "comfort": ["Climatizador"]},
            actor_id="seller-1",
        )

        assert [c.field for c in result.changes] == ["price", "comfort"]
        assert result.vehicle.price == 26500.0
        assert result.vehicle.updated_at == clock.now()
        assert result.vehicle.updated_by == "seller-1"

        records = audit_repo.all()
        assert {r.field_affected for r in records} == {"price", "comfort"}
        price = next(r for r in records if r.field_affected == "price")
        assert (price.value_before, price.value_after) == ("25000.0", "26500.0")
        assert price.notes == "Field 'price' updated"
        assert len(result.records) == 2

    async def test_no_changes_no_records(self, update_uc, stored_vehicle, audit_repo):
        vehicle = await stored_vehicle(color="ROJO")
        result = await update_uc.execute(vehicle.id, {"color": "ROJO", "make": "Toyota"})
        assert result.changes == []
        assert audit_repo.all() == []

    @pytest.mark.parametrize("field, value", [("status", "VENDIDO"), ("favorite", True)])
    async def test_rejects_dedicated_fields(self, update_uc, stored_vehicle, field, value):
        vehicle = await stored_vehicle()
        with pytest.raises(ValidationError, match=field):
            await update_uc.execute(vehicle.id, {field: value})

    async def test_invalid_patch_leaves_vehicle_untouched(self, update_uc, stored_vehicle, vehicle_repo, audit_repo):
        vehicle = await stored_vehicle()
        with pytest.raises(ValidationError):
            await update_uc.execute(vehicle.id, {"mileage": -1})
        assert await vehicle_repo.find_by_id(vehicle.id) == vehicle
        assert audit_repo.all() == []

    async def test_missing_vehicle(self, update_uc, id_generator):
        with pytest.raises(NotFoundError):
            await update_uc.execute(id_generator.new_id(), {"price": 1.0})

    async def test_plate_must_stay_unique(self, update_uc, stored_vehicle):
        await stored_vehicle(plate="AA111AA")
        other = await stored_vehicle(plate="BB222BB")
        with pytest.raises(ConflictError):
            await update_uc.execute(other.id, {"plate": "AA111AA"})

    async def test_partial_audit_failure_still_updates(
        self, vehicle_repo, stored_vehicle, partially_failing_historial, clock
    ):
        historial, repo = partially_failing_historial(
            lambda record: record.field_affected == "name"
        )
        use_case = UpdateVehicleUseCase(vehicle_repo, historial, clock=clock)
        vehicle = await stored_vehicle()

        result = await use_case.execute(vehicle.id, {"name": "Corolla SEG", "year": 2021})

        assert result.vehicle.name == "Corolla SEG"
        assert [r.field_affected for r in result.records] == ["year"]
        assert [r.field_affected for r in repo.all()] == ["year"]

    async def test_malformed_value_is_a_validation_error(
        self, update_uc, stored_vehicle, vehicle_repo, audit_repo
    ):
        vehicle = await stored_vehicle()

        with pytest.raises(ValidationError, match="Field 'price' must be a number"):
            await update_uc.execute(vehicle.id, {"price": None})

        assert (await vehicle_repo.find_by_id(vehicle.id)).price == 25000.0
        assert audit_repo.all() == []


# =============================================================================
# Status change
# =============================================================================


class TestChangeVehicleStatus:
    async def test_changes_status_and_records(self, status_uc, stored_vehicle, audit_repo):
        vehicle = await stored_vehicle()

        result = await status_uc.execute(vehicle.id, "DISPONIBLE", actor_id="seller-1")

        assert result.previous_status is VehicleStatus.TO_BE_INTAKEN
        assert result.new_status is VehicleStatus.AVAILABLE
        assert result.favorite_cleared is False
        assert result.message == "Status changed from POR_INGRESAR to DISPONIBLE"

        [record] = audit_repo.all()
        assert record.id == result.record_id
        assert record.action_kind is ActionKind.STATUS_CHANGE
        assert record.field_affected == "status"
        assert (record.value_before, record.value_after) == ("POR_INGRESAR", "DISPONIBLE")
        assert record.notes == result.message
        assert record.created_by == "seller-1"

    async def test_custom_notes(self, status_uc, stored_vehicle, audit_repo):
        vehicle = await stored_vehicle()
        await status_uc.execute(vehicle.id, VehicleStatus.RESERVED, notes="Seña recibida")
        assert audit_repo.all()[0].notes == "Seña recibida"

    async def test_selling_a_favorite_clears_it(self, status_uc, stored_vehicle, vehicle_repo, audit_repo):
        vehicle = await stored_vehicle(status="DISPONIBLE")
        await vehicle_repo.update(vehicle.update_with({"favorite": True}))

        result = await status_uc.execute(vehicle.id, "VENDIDO")

        assert result.favorite_cleared is True
        assert result.vehicle.favorite is False
        assert result.message.endswith("(removed from favorites)")
        assert await vehicle_repo.count_favorites() == 0
        [record] = audit_repo.all()
        assert record.metadata["context"]["favorite_cleared"] is True

    async def test_selling_a_reserved_favorite(self, status_uc, stored_vehicle, vehicle_repo, audit_repo):
        vehicle = await stored_vehicle(status="RESERVADO")
        await vehicle_repo.update(vehicle.update_with({"favorite": True}))

        result = await status_uc.execute(vehicle.id, VehicleStatus.SOLD)

        stored = await vehicle_repo.find_by_id(vehicle.id)
        assert stored.status is VehicleStatus.SOLD
        assert stored.favorite is False
        [record] = audit_repo.all()
        assert record.action_kind is ActionKind.STATUS_CHANGE
        assert record.field_affected == "status"
        assert (record.value_before, record.value_after) == ("RESERVADO", "VENDIDO")
        assert record.id == result.record_id

    async def test_releasing_a_reserved_favorite_keeps_it(
        self, status_uc, stored_vehicle, vehicle_repo, audit_repo
    ):
        vehicle = await stored_vehicle(status="RESERVADO")
        await vehicle_repo.update(vehicle.update_with({"favorite": True}))

        result = await status_uc.execute(vehicle.id, VehicleStatus.AVAILABLE)

        assert result.favorite_cleared is False
        stored = await vehicle_repo.find_by_id(vehicle.id)
        assert stored.status is VehicleStatus.AVAILABLE
        assert stored.favorite is True
        [record] = audit_repo.all()
        assert record.metadata["context"]["favorite_cleared"] is False

    async def test_sold_is_terminal(self, status_uc, stored_vehicle, audit_repo):
        vehicle = await stored_vehicle()
        await status_uc.execute(vehicle.id, "VENDIDO")

        with pytest.raises(TerminalStateError):
            await status_uc.execute(vehicle.id, "DISPONIBLE")
        assert len(audit_repo.all()) == 1

    async def test_no_op_is_rejected(self, status_uc, stored_vehicle):
        vehicle = await stored_vehicle(status="DISPONIBLE")
        with pytest.raises(NoOpTransitionError):
            await status_uc.execute(vehicle.id, "DISPONIBLE")

    async def test_unknown_status_string(self, status_uc, stored_vehicle):
        vehicle = await stored_vehicle()
        with pytest.raises(ValidationError, match="Invalid status"):
            await status_uc.execute(vehicle.id, "EN_TALLER")

    async def test_deleted_vehicle_cannot_change(self, status_uc, stored_vehicle, vehicle_repo):
        vehicle = await stored_vehicle()
        await vehicle_repo.soft_delete(vehicle.id)
        with pytest.raises(ValidationError, match="deleted vehicle"):
            await status_uc.execute(vehicle.id, "DISPONIBLE")

    async def test_audit_failure_keeps_the_change(
        self, vehicle_repo, stored_vehicle, failing_historial, clock
    ):
        use_case = ChangeVehicleStatusUseCase(vehicle_repo, failing_historial, clock=clock)
        vehicle = await stored_vehicle()

        result = await use_case.execute(vehicle.id, "DISPONIBLE")

        assert result.record_id is None
        stored = await vehicle_repo.find_by_id(vehicle.id)
        assert stored.status is VehicleStatus.AVAILABLE


# =============================================================================
# Favorites
# =============================================================================


class TestManageFavorite:
    async def test_mark_and_unmark(self, favorite_uc, stored_vehicle, audit_repo):
        vehicle = await stored_vehicle()

        marked = await favorite_uc.execute(vehicle.id, True, actor_id="admin-1")
        assert marked.changed and marked.vehicle.favorite
        unmarked = await favorite_uc.execute(vehicle.id, False)
        assert unmarked.changed and not unmarked.vehicle.favorite

        records = audit_repo.all()
        assert [r.notes for r in records] == [
            "Vehicle marked as favorite",
            "Vehicle removed from favorites",
        ]
        assert [(r.value_before, r.value_after) for r in records] == [
            ("false", "true"),
            ("true", "false"),
        ]
        assert all(r.field_affected == "favorite" for r in records)

    async def test_custom_notes(self, favorite_uc, stored_vehicle, audit_repo):
        vehicle = await stored_vehicle()
        await favorite_uc.execute(vehicle.id, True, notes="Vidriera de marzo")
        await favorite_uc.execute(vehicle.id, False, notes="")

        assert [r.notes for r in audit_repo.all()] == [
            "Vidriera de marzo",
            "Vehicle removed from favorites",
        ]

    async def test_same_value_is_a_no_op(self, favorite_uc, stored_vehicle, audit_repo):
        vehicle = await stored_vehicle()
        result = await favorite_uc.execute(vehicle.id, False)
        assert result.changed is False
        assert result.record_id is None
        assert audit_repo.all() == []

    async def test_capacity_is_enforced(self, favorite_uc, stored_vehicle, vehicle_repo):
        for i in range(6):
            vehicle = await stored_vehicle(plate=f"FAV{i:03d}")
            await favorite_uc.execute(vehicle.id, True)

        seventh = await stored_vehicle(plate="FAV999")
        with pytest.raises(CapacityExceededError) as exc:
            await favorite_uc.execute(seventh.id, True)

        assert exc.value.current_count == 6
        assert (await vehicle_repo.find_by_id(seventh.id)).favorite is False

    async def test_unmarking_is_allowed_at_capacity(self, vehicle_repo, historial, clock, stored_vehicle):
        use_case = ManageFavoriteUseCase(vehicle_repo, historial, clock=clock, max_slots=1)
        first = await stored_vehicle(plate="ONE111")
        await use_case.execute(first.id, True)

        result = await use_case.execute(first.id, False)
        assert result.changed

    async def test_deleted_favorites_do_not_count(self, vehicle_repo, historial, clock, stored_vehicle):
        use_case = ManageFavoriteUseCase(vehicle_repo, historial, clock=clock, max_slots=1)
        first = await stored_vehicle(plate="ONE111")
        await use_case.execute(first.id, True)
        await vehicle_repo.soft_delete(first.id)

        second = await stored_vehicle(plate="TWO222")
        assert (await use_case.execute(second.id, True)).changed

    async def test_deleted_vehicle_rejected(self, favorite_uc, stored_vehicle, vehicle_repo):
        vehicle = await stored_vehicle()
        await vehicle_repo.soft_delete(vehicle.id)
        with pytest.raises(ValidationError):
            await favorite_uc.execute(vehicle.id, True)


# =============================================================================
# Delete / Restore
# =============================================================================


class TestDeleteRestoreVehicle:
    async def test_soft_delete_and_restore(self, vehicle_repo, historial, stored_vehicle, audit_repo):
        delete_uc = DeleteVehicleUseCase(vehicle_repo, historial)
        restore_uc = RestoreVehicleUseCase(vehicle_repo, historial)
        vehicle = await stored_vehicle()

        deleted = await delete_uc.execute(vehicle.id, actor_id="admin-1")
        assert deleted.is_deleted
        assert await vehicle_repo.find_all_active() == []

        restored = await restore_uc.execute(vehicle.id)
        assert restored.active

        records = audit_repo.all()
        assert [r.action_kind for r in records] == [ActionKind.DELETE, ActionKind.RESTORE]
        assert records[0].notes == "Vehicle deleted: Toyota Corolla XEi - AB123CD"
        assert records[1].notes == "Vehicle restored: Toyota Corolla XEi - AB123CD"

    async def test_double_delete_and_restore_active_fail(self, vehicle_repo, historial, stored_vehicle):
        delete_uc = DeleteVehicleUseCase(vehicle_repo, historial)
        restore_uc = RestoreVehicleUseCase(vehicle_repo, historial)
        vehicle = await stored_vehicle()

        with pytest.raises(ValidationError, match="already active"):
            await restore_uc.execute(vehicle.id)
        await delete_uc.execute(vehicle.id)
        with pytest.raises(ValidationError, match="already deleted"):
            await delete_uc.execute(vehicle.id)

    async def test_missing_vehicle(self, vehicle_repo, historial, id_generator):
        with pytest.raises(NotFoundError):
            await DeleteVehicleUseCase(vehicle_repo, historial).execute(id_generator.new_id())


# =============================================================================
# Listings
# =============================================================================


class TestListings:
    async def test_list_vehicles_paginates_and_clamps(self, vehicle_repo, stored_vehicle, clock):
        for i in range(5):
            clock.advance(minutes=1)
            await stored_vehicle(plate=f"LST{i:03d}", price=1000.0 * (i + 1))

        use_case = ListVehiclesUseCase(vehicle_repo, max_page_size=2)
        page = await use_case.execute(PageRequest(page=1, limit=50))

        assert page.page_info.limit == 2
        assert page.page_info.total == 5
        assert page.page_info.total_pages == 3
        assert [v.plate for v in page.items] == ["LST004", "LST003"]

    async def test_list_vehicles_with_filters(self, vehicle_repo, stored_vehicle):
        await stored_vehicle(plate="P1", make="Ford", price=9000.0)
        await stored_vehicle(plate="P2", make="Ford", price=15000.0)
        await stored_vehicle(plate="P3", make="Fiat", price=9000.0)

        page = await ListVehiclesUseCase(vehicle_repo).execute(
            PageRequest(order_by="price", order_direction="asc"),
            VehicleFilters(make="Ford", price_max=10000.0),
        )
        assert [v.plate for v in page.items] == ["P1"]

    async def test_favorites_and_makes(self, vehicle_repo, historial, clock, stored_vehicle):
        favorite_uc = ManageFavoriteUseCase(vehicle_repo, historial, clock=clock)
        a = await stored_vehicle(plate="A1", make="Renault")
        await stored_vehicle(plate="B1", make="Peugeot")
        await favorite_uc.execute(a.id, True)

        favorites = await ListFavoritesUseCase(vehicle_repo).execute()
        assert [v.id for v in favorites] == [a.id]
        assert await ListAvailableMakesUseCase(vehicle_repo).execute() == ["Peugeot", "Renault"]


# =============================================================================
# End-to-end scenarios
# =============================================================================


async def test_vehicle_full_lifecycle(
    create_uc, update_uc, status_uc, favorite_uc, historial, vehicle_payload, clock
):
    """R: Intake -> available -> favorite -> reserved -> sold leaves a full timeline."""
    vehicle = await create_uc.execute(vehicle_payload(), actor_id="admin-1")
    clock.advance(minutes=1)
    await status_uc.execute(vehicle.id, "DISPONIBLE", actor_id="admin-1")
    clock.advance(minutes=1)
    await favorite_uc.execute(vehicle.id, True, actor_id="admin-1")
    clock.advance(minutes=1)
    await update_uc.execute(vehicle.id, {"price": 24000.0}, actor_id="admin-1")
    clock.advance(minutes=1)
    reserved = await status_uc.execute(vehicle.id, "RESERVADO", actor_id="seller-1")
    clock.advance(minutes=1)
    sold = await status_uc.execute(vehicle.id, "VENDIDO", actor_id="seller-1")

    assert reserved.favorite_cleared is True
    assert sold.favorite_cleared is False
    assert sold.vehicle.status is VehicleStatus.SOLD

    history = await historial.entity_history(vehicle.id, EntityType.VEHICLE)
    assert [r.summary() for r in history] == [
        'Status changed from "RESERVADO" to "VENDIDO"',
        'Status changed from "DISPONIBLE" to "RESERVADO"',
        "Field 'price' updated",
        "Field 'favorite' updated",
        'Status changed from "POR_INGRESAR" to "DISPONIBLE"',
        "Vehicle created",
    ]
    last = await historial.last_status_change(vehicle.id, EntityType.VEHICLE)
    assert last.value_after == "VENDIDO"


async def test_favorite_showcase_capacity_scenario(
    create_uc, status_uc, favorite_uc, vehicle_payload, vehicle_repo
):
    """R: Reserving a favorite frees a showcase slot for another vehicle."""
    ids = []
    for i in range(7):
        vehicle = await create_uc.execute(
            vehicle_payload(plate=f"SHW{i:03d}", status="DISPONIBLE")
        )
        ids.append(vehicle.id)

    for vehicle_id in ids[:6]:
        await favorite_uc.execute(vehicle_id, True)
    with pytest.raises(CapacityExceededError):
        await favorite_uc.execute(ids[6], True)

    await status_uc.execute(ids[0], "RESERVADO")
    assert await vehicle_repo.count_favorites() == 5

    result = await favorite_uc.execute(ids[6], True)
    assert result.changed
    assert await vehicle_repo.count_favorites() == 6

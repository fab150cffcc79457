"""
Name: HistorialService Unit Tests

Responsibilities:
  - Verify record construction, metadata enrichment and persistence
  - Verify history queries (newest first, last status change, pagination)
  - Verify best-effort helpers never raise and log each failure

Collaborators:
  - dealership.application.historial_service
  - InMemoryAuditRecordRepository (conftest)
"""

import logging

import pytest

from dealership.application.historial_service import (
    HistorialService,
    audit_all_best_effort,
    audit_best_effort,
)
from dealership.domain.audit import ActionKind, EntityType
from dealership.domain.change_detection import FieldChange
from dealership.domain.entities import VehicleStatus
from dealership.domain.errors import ValidationError
from dealership.domain.repositories import AuditRecordFilters

pytestmark = pytest.mark.unit


class TestWrites:
    async def test_record_creation(self, historial, audit_repo, clock):
        record = await historial.record_creation(
            "veh-1",
            EntityType.VEHICLE,
            "admin-1",
            metadata={"vehicle": {"plate": "AB123CD"}},
            notes="Vehicle created",
        )

        assert audit_repo.all() == [record]
        assert record.action_kind is ActionKind.CREATE
        assert record.created_by == "admin-1"
        assert record.created_at == clock.now()
        assert record.field_affected is None
        assert record.metadata["operation_type"] == "crud"
        assert record.metadata["action"] == "CREAR"
        assert record.metadata["timestamp"].startswith("2025-03-10T12:00:00")
        assert record.metadata["context"] == {"vehicle": {"plate": "AB123CD"}}
        assert record.metadata["change"] is None

    async def test_record_update_stringifies_values(self, historial):
        record = await historial.record_update(
            "veh-1",
            EntityType.VEHICLE,
            FieldChange("comfort", (), ("Aire",)),
        )

        assert record.field_affected == "comfort"
        assert record.value_before == "[]"
        assert record.value_after == '["Aire"]'
        assert record.notes == "Field 'comfort' updated"
        assert record.metadata["change"] == '[] -> ["Aire"]'

    async def test_record_update_keeps_null_side(self, historial):
        record = await historial.record_update(
            "per-1", EntityType.PERSON, FieldChange("phone", None, "555-1234")
        )
        assert record.value_before == "null"
        assert record.value_after == "555-1234"

    async def test_record_status_change(self, historial):
        record = await historial.record_status_change(
            "veh-1",
            EntityType.VEHICLE,
            field_affected="status",
            before=VehicleStatus.AVAILABLE,
            after=VehicleStatus.SOLD,
            notes="Sold to walk-in customer",
            actor_id="seller-9",
        )

        assert record.is_status_change
        assert record.value_before == "DISPONIBLE"
        assert record.value_after == "VENDIDO"
        assert record.metadata["operation_type"] == "status_change"
        assert record.metadata["field"] == "status"
        assert record.metadata["transition"] == "DISPONIBLE -> VENDIDO"

    async def test_invalid_record_is_not_persisted(self, historial, audit_repo):
        with pytest.raises(ValidationError):
            await historial.record_status_change(
                "veh-1",
                EntityType.VEHICLE,
                field_affected="status",
                before="DISPONIBLE",
                after="VENDIDO",
                notes="",
            )
        assert audit_repo.all() == []

    async def test_missing_entity_id_is_rejected(self, historial):
        with pytest.raises(ValidationError):
            await historial.record_creation(None, EntityType.VEHICLE)

    async def test_record_field_changes_one_per_field(self, historial, audit_repo):
        records = await historial.record_field_changes(
            "veh-1",
            EntityType.VEHICLE,
            [FieldChange("name", "A", "B"), FieldChange("price", 1.0, 2.0)],
            actor_id="u1",
        )
        assert [r.field_affected for r in records] == ["name", "price"]
        assert len(audit_repo.all()) == 2

    async def test_lifecycle_shortcuts(self, historial):
        deleted = await historial.record_deletion("per-1", EntityType.PERSON)
        restored = await historial.record_restoration("per-1", EntityType.PERSON)
        assert deleted.action_kind is ActionKind.DELETE
        assert restored.action_kind is ActionKind.RESTORE

    async def test_store_errors_propagate(self, failing_historial):
        with pytest.raises(RuntimeError, match="storage is down"):
            await failing_historial.record_creation("veh-1", EntityType.VEHICLE)


class TestQueries:
    async def test_entity_history_newest_first(self, historial, clock):
        await historial.record_creation("veh-1", EntityType.VEHICLE)
        clock.advance(minutes=1)
        await historial.record_update(
            "veh-1", EntityType.VEHICLE, FieldChange("price", 1, 2)
        )
        clock.advance(minutes=1)
        await historial.record_deletion("veh-1", EntityType.VEHICLE)
        await historial.record_creation("veh-2", EntityType.VEHICLE)

        history = await historial.entity_history("veh-1", EntityType.VEHICLE)
        assert [r.action_kind for r in history] == [
            ActionKind.DELETE,
            ActionKind.UPDATE,
            ActionKind.CREATE,
        ]

        limited = await historial.entity_history("veh-1", EntityType.VEHICLE, limit=1)
        assert [r.action_kind for r in limited] == [ActionKind.DELETE]

    async def test_entity_type_scopes_history(self, historial):
        await historial.record_creation("same-id", EntityType.VEHICLE)
        await historial.record_creation("same-id", EntityType.PERSON)

        history = await historial.entity_history("same-id", EntityType.PERSON)
        assert len(history) == 1
        assert history[0].entity_type is EntityType.PERSON

    async def test_last_status_change(self, historial, clock):
        assert await historial.last_status_change("veh-1", EntityType.VEHICLE) is None

        for before, after in (("POR_INGRESAR", "DISPONIBLE"), ("DISPONIBLE", "RESERVADO")):
            clock.advance(minutes=1)
            await historial.record_status_change(
                "veh-1",
                EntityType.VEHICLE,
                field_affected="status",
                before=before,
                after=after,
                notes=f"{before} to {after}",
            )

        last = await historial.last_status_change("veh-1", EntityType.VEHICLE)
        assert last.value_after == "RESERVADO"
        assert len(await historial.status_changes("veh-1", EntityType.VEHICLE)) == 2

    async def test_paginate_with_filters(self, historial):
        for i in range(5):
            await historial.record_creation(f"veh-{i}", EntityType.VEHICLE)
        await historial.record_deletion("veh-0", EntityType.VEHICLE)

        page = await historial.paginate(
            1, 2, AuditRecordFilters(action_kind=ActionKind.CREATE)
        )
        assert len(page.items) == 2
        assert page.page_info.total == 5
        assert page.page_info.total_pages == 3
        assert page.page_info.has_next


class TestBestEffort:
    async def test_audit_best_effort_returns_result(self, historial):
        record = await audit_best_effort(
            historial.record_creation("veh-1", EntityType.VEHICLE),
            operation="create_vehicle",
        )
        assert record is not None

    async def test_audit_best_effort_swallows_and_logs(self, failing_historial, caplog):
        with caplog.at_level(logging.ERROR, logger="dealership"):
            result = await audit_best_effort(
                failing_historial.record_creation("veh-1", EntityType.VEHICLE),
                operation="create_vehicle",
                entity_id="veh-1",
            )

        assert result is None
        failures = [r for r in caplog.records if r.getMessage() == "Falló la escritura del historial"]
        assert len(failures) == 1
        assert failures[0].operation == "create_vehicle"
        assert failures[0].exc_info is not None

    async def test_audit_all_keeps_successes(self, partially_failing_historial, caplog):
        service, repo = partially_failing_historial(
            lambda record: record.field_affected == "price"
        )
        changes = [
            FieldChange("name", "A", "B"),
            FieldChange("price", 1.0, 2.0),
            FieldChange("mileage", 10, 20),
        ]

        with caplog.at_level(logging.ERROR, logger="dealership"):
            written = await audit_all_best_effort(
                (
                    service.record_update("veh-1", EntityType.VEHICLE, c)
                    for c in changes
                ),
                operation="update_vehicle",
                entity_id="veh-1",
            )

        assert [r.field_affected for r in written] == ["name", "mileage"]
        assert [r.field_affected for r in repo.all()] == ["name", "mileage"]
        assert repo.attempts == 3
        failures = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(failures) == 1

    async def test_audit_all_with_no_writes(self):
        assert await audit_all_best_effort([], operation="noop") == []


def test_service_requires_injected_collaborators(audit_repo):
    with pytest.raises(TypeError):
        HistorialService(audit_repo)  # type: ignore[call-arg]

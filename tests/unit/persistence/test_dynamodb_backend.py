"""Unit tests for DynamoDBMappingStore and DynamoDBExportLog using moto."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import boto3
import pytest
from moto import mock_aws

from payroll_bridge.core.exceptions import ExportLogError, ExportNotFoundError, MappingStoreError
from payroll_bridge.models.export import ExportStatus, PayrollExport
from payroll_bridge.persistence.dynamodb_backend import DynamoDBExportLog, DynamoDBMappingStore
from payroll_bridge.persistence.memory_backend import MemoryCacheBackend

TABLE_SUFFIX = "-test"
REGION = "eu-north-1"

# ---------- helpers ----------

def _create_table(client, name: str, pk: str = "PK", sk: str = "SK"):
    """Create a DynamoDB table with PK/SK key schema."""
    client.create_table(
        TableName=name,
        KeySchema=[
            {"AttributeName": pk, "KeyType": "HASH"},
            {"AttributeName": sk, "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": pk, "AttributeType": "S"},
            {"AttributeName": sk, "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )


def _create_exports_table(client, name: str):
    """Exports table with the createdAt index the export log lists from."""
    client.create_table(
        TableName=name,
        KeySchema=[
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "PK", "AttributeType": "S"},
            {"AttributeName": "SK", "AttributeType": "S"},
            {"AttributeName": "entityType", "AttributeType": "S"},
            {"AttributeName": "createdAt", "AttributeType": "S"},
        ],
        GlobalSecondaryIndexes=[{
            "IndexName": "createdAt-index",
            "KeySchema": [
                {"AttributeName": "entityType", "KeyType": "HASH"},
                {"AttributeName": "createdAt", "KeyType": "RANGE"},
            ],
            "Projection": {"ProjectionType": "ALL"},
        }],
        BillingMode="PAY_PER_REQUEST",
    )


def _put_external_id(table, employee_id: str, system: str, external_id: str, active: bool = True):
    table.put_item(Item={
        "PK": f"EMPLOYEE#{employee_id}", "SK": f"SYSTEM#{system}",
        "employeeId": employee_id, "externalId": external_id, "isActive": active,
    })


def _put_code(table, internal: str, system: str, external: str, active: bool = True):
    table.put_item(Item={
        "PK": f"SYSTEM#{system}", "SK": f"CODE#{internal}",
        "internalCode": internal, "externalCode": external, "isActive": active,
    })


# ---------- fixtures ----------

@pytest.fixture
def aws():
    with mock_aws():
        ddb = boto3.resource("dynamodb", region_name=REGION)
        client = boto3.client("dynamodb", region_name=REGION)

        for name in ["payroll-employee-external-ids", "payroll-salary-type-mappings"]:
            _create_table(client, f"{name}{TABLE_SUFFIX}")
        _create_exports_table(client, f"payroll-exports{TABLE_SUFFIX}")

        yield ddb


@pytest.fixture
def ids_table(aws):
    return aws.Table(f"payroll-employee-external-ids{TABLE_SUFFIX}")


@pytest.fixture
def codes_table(aws):
    return aws.Table(f"payroll-salary-type-mappings{TABLE_SUFFIX}")


@pytest.fixture
def store(aws):
    return DynamoDBMappingStore(table_suffix=TABLE_SUFFIX, region=REGION)


@pytest.fixture
def cached_store(aws):
    cache = MemoryCacheBackend()
    return DynamoDBMappingStore(table_suffix=TABLE_SUFFIX, region=REGION, cache=cache), cache


# ---------- get_external_ids ----------

class TestGetExternalIds:
    def test_returns_active_mappings_only(self, store, ids_table):
        _put_external_id(ids_table, "e1", "tripletex", "1001")
        _put_external_id(ids_table, "e2", "tripletex", "1002", active=False)
        _put_external_id(ids_table, "e3", "poweroffice", "PO-3")

        result = store.get_external_ids(["e1", "e2", "e3", "e4"], "tripletex")
        assert result == {"e1": "1001"}

    def test_duplicates_in_request(self, store, ids_table):
        _put_external_id(ids_table, "e1", "tripletex", "1001")
        assert store.get_external_ids(["e1", "e1"], "tripletex") == {"e1": "1001"}

    def test_more_than_one_batch(self, store, ids_table):
        with ids_table.batch_writer() as batch:
            for i in range(250):
                batch.put_item(Item={
                    "PK": f"EMPLOYEE#e{i}", "SK": "SYSTEM#tripletex",
                    "employeeId": f"e{i}", "externalId": str(1000 + i), "isActive": True,
                })
        result = store.get_external_ids([f"e{i}" for i in range(250)], "tripletex")
        assert len(result) == 250
        assert result["e249"] == "1249"

    def test_empty_request(self, store):
        assert store.get_external_ids([], "tripletex") == {}

    def test_missing_table_raises_store_error(self, aws):
        store = DynamoDBMappingStore(table_suffix="-missing", region=REGION)
        with pytest.raises(MappingStoreError):
            store.get_external_ids(["e1"], "tripletex")


class TestGetExternalId:
    def test_single_lookup(self, store, ids_table):
        _put_external_id(ids_table, "e1", "tripletex", "1001")
        _put_external_id(ids_table, "e2", "tripletex", "1002", active=False)
        assert store.get_external_id("e1", "tripletex") == "1001"
        assert store.get_external_id("e2", "tripletex") is None
        assert store.get_external_id("e1", "poweroffice") is None


# ---------- salary codes ----------

class TestGetSalaryCodeMap:
    def test_returns_active_codes_for_system(self, store, codes_table):
        _put_code(codes_table, "1000", "tripletex", "10")
        _put_code(codes_table, "3010", "tripletex", "310")
        _put_code(codes_table, "2010", "tripletex", "210", active=False)
        _put_code(codes_table, "1000", "poweroffice", "TL")

        assert store.get_salary_code_map("tripletex") == {"1000": "10", "3010": "310"}

    def test_returns_empty_for_unknown_system(self, store):
        assert store.get_salary_code_map("fiken") == {}

    def test_caches_map(self, cached_store, codes_table):
        store, cache = cached_store
        _put_code(codes_table, "1000", "tripletex", "10")

        assert store.get_salary_code_map("tripletex") == {"1000": "10"}
        assert "10" in cache.get("salary_codes:tripletex")

        _put_code(codes_table, "3010", "tripletex", "310")
        assert store.get_salary_code_map("tripletex") == {"1000": "10"}

    def test_single_code(self, store, codes_table):
        _put_code(codes_table, "1000", "tripletex", "10")
        assert store.get_salary_code("1000", "tripletex") == "10"
        assert store.get_salary_code("9999", "tripletex") is None


    def test_single_code_agrees_with_cached_map(self, cached_store, codes_table):
        store, _ = cached_store
        _put_code(codes_table, "1000", "tripletex", "10")
        store.get_salary_code_map("tripletex")

        _put_code(codes_table, "1000", "tripletex", "11")
        _put_code(codes_table, "3010", "tripletex", "310")
        assert store.get_salary_code("1000", "tripletex") == "10"
        assert store.get_salary_code("3010", "tripletex") is None

    def test_invalidate_salary_codes(self, cached_store, codes_table):
        store, cache = cached_store
        _put_code(codes_table, "1000", "tripletex", "10")
        store.get_salary_code_map("tripletex")
        _put_code(codes_table, "1000", "tripletex", "11")

        store.invalidate_salary_codes("tripletex")

        assert cache.get("salary_codes:tripletex") is None
        assert store.get_salary_code("1000", "tripletex") == "11"
        assert store.get_salary_code_map("tripletex") == {"1000": "11"}

    def test_invalidate_without_cache(self, store, codes_table):
        _put_code(codes_table, "1000", "tripletex", "10")
        store.invalidate_salary_codes("tripletex")
        assert store.get_salary_code_map("tripletex") == {"1000": "10"}

# ---------- export log ----------

def _export(minutes: int = 0, **fields) -> PayrollExport:
    return PayrollExport(
        target_system="tripletex",
        period_start=date(2024, 3, 1),
        period_end=date(2024, 3, 31),
        created_at=datetime(2024, 4, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes),
        **fields,
    )


class TestDynamoDBExportLog:
    @pytest.fixture
    def log(self, aws):
        return DynamoDBExportLog(table_suffix=TABLE_SUFFIX, region=REGION)

    def test_round_trips_export(self, log):
        export = _export(status=ExportStatus.COMPLETED, total_amount=Decimal("1250.50"))
        log.save(export)
        loaded = log.get(export.id)
        assert loaded.status == ExportStatus.COMPLETED
        assert loaded.total_amount == Decimal("1250.50")

    def test_save_overwrites(self, log):
        export = _export()
        log.save(export)
        export.status = ExportStatus.FAILED
        log.save(export)
        assert log.get(export.id).status == ExportStatus.FAILED
        assert len(log.list_recent()) == 1

    def test_get_missing_raises(self, log):
        with pytest.raises(ExportNotFoundError):
            log.get("nope")

    def test_store_errors_wrapped(self, aws):
        log = DynamoDBExportLog(table_suffix="-missing", region=REGION)
        with pytest.raises(ExportLogError):
            log.save(_export())
        with pytest.raises(ExportLogError):
            log.get("nope")
        with pytest.raises(ExportLogError):
            log.list_recent()

    def test_list_recent_newest_first(self, log):
        exports = [_export(minutes) for minutes in (5, 0, 10)]
        for export in exports:
            log.save(export)
        recent = log.list_recent(limit=2)
        assert [e.id for e in recent] == [exports[2].id, exports[0].id]

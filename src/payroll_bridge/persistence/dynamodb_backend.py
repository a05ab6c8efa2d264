"""DynamoDB backends: IMappingStore with Redis caching, and IExportLog."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

import boto3
from botocore.exceptions import ClientError

from payroll_bridge.core.exceptions import ExportLogError, ExportNotFoundError, MappingStoreError
from payroll_bridge.models.export import PayrollExport

logger = logging.getLogger(__name__)

EXTERNAL_IDS_TABLE = "payroll-employee-external-ids"
SALARY_MAPPINGS_TABLE = "payroll-salary-type-mappings"
EXPORTS_TABLE = "payroll-exports"
EXPORTS_CREATED_INDEX = "createdAt-index"

BATCH_GET_LIMIT = 100  # DynamoDB BatchGetItem max keys per request


def _resource(region: str, endpoint_url: str | None):
    kwargs: dict = {"region_name": region}
    if endpoint_url:
        kwargs["endpoint_url"] = endpoint_url
    return boto3.resource("dynamodb", **kwargs)


class DynamoDBMappingStore:
    """Production IMappingStore backed by DynamoDB + optional Redis cache.

    Employee ids live under ``PK=EMPLOYEE#<id>, SK=SYSTEM#<system>``;
    salary codes under ``PK=SYSTEM#<system>, SK=CODE#<internal code>``.
    Rows with ``isActive`` false are ignored.
    """

    CACHE_TTL = 300  # 5 minutes

    def __init__(self, table_suffix: str = "", region: str = "eu-north-1",
                 endpoint_url: str | None = None, cache: Any = None,
                 cache_ttl: int | None = None) -> None:
        self._table_suffix = table_suffix
        self._region = region
        self._endpoint_url = endpoint_url
        self._cache = cache
        self._cache_ttl = cache_ttl if cache_ttl is not None else self.CACHE_TTL
        self._ddb = _resource(region, endpoint_url)

    def _table_name(self, base: str) -> str:
        return f"{base}{self._table_suffix}"

    def _table(self, base: str):
        return self._ddb.Table(self._table_name(base))

    # ---- employee external ids ----

    def get_external_ids(self, employee_ids: Sequence[str], system_type: str) -> dict[str, str]:
        distinct = list(dict.fromkeys(employee_ids))
        table_name = self._table_name(EXTERNAL_IDS_TABLE)
        out: dict[str, str] = {}
        try:
            for start in range(0, len(distinct), BATCH_GET_LIMIT):
                chunk = distinct[start:start + BATCH_GET_LIMIT]
                request = {
                    table_name: {
                        "Keys": [
                            {"PK": f"EMPLOYEE#{emp_id}", "SK": f"SYSTEM#{system_type}"}
                            for emp_id in chunk
                        ]
                    }
                }
                while request:
                    resp = self._ddb.batch_get_item(RequestItems=request)
                    for item in resp.get("Responses", {}).get(table_name, []):
                        if item.get("isActive", True) and item.get("externalId"):
                            out[item["employeeId"]] = item["externalId"]
                    request = resp.get("UnprocessedKeys") or {}
        except ClientError as exc:
            raise MappingStoreError(
                f"External id lookup failed for system={system_type!r}: {exc}"
            ) from exc
        return out

    def get_external_id(self, employee_id: str, system_type: str) -> str | None:
        try:
            resp = self._table(EXTERNAL_IDS_TABLE).get_item(
                Key={"PK": f"EMPLOYEE#{employee_id}", "SK": f"SYSTEM#{system_type}"}
            )
        except ClientError as exc:
            raise MappingStoreError(
                f"External id lookup failed for employee={employee_id!r}: {exc}"
            ) from exc
        item = resp.get("Item")
        if not item or not item.get("isActive", True):
            return None
        return item.get("externalId") or None

    # ---- salary codes ----

    @staticmethod
    def _code_map_key(system_type: str) -> str:
        return f"salary_codes:{system_type}"

    def _cached_code_map(self, system_type: str) -> dict[str, str] | None:
        if self._cache is None:
            return None
        cached = self._cache.get(self._code_map_key(system_type))
        return json.loads(cached) if cached is not None else None

    def get_salary_code_map(self, system_type: str) -> dict[str, str]:
        cached = self._cached_code_map(system_type)
        if cached is not None:
            return cached

        tbl = self._table(SALARY_MAPPINGS_TABLE)
        code_map: dict[str, str] = {}
        kwargs: dict[str, Any] = {
            "KeyConditionExpression": "PK = :pk",
            "ExpressionAttributeValues": {":pk": f"SYSTEM#{system_type}"},
        }
        try:
            while True:
                resp = tbl.query(**kwargs)
                for item in resp.get("Items", []):
                    if item.get("isActive", True) and item.get("externalCode"):
                        code_map[item["internalCode"]] = item["externalCode"]
                if "LastEvaluatedKey" not in resp:
                    break
                kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]
        except ClientError as exc:
            raise MappingStoreError(
                f"Salary code lookup failed for system={system_type!r}: {exc}"
            ) from exc

        if self._cache is not None:
            self._cache.setex(self._code_map_key(system_type), self._cache_ttl, json.dumps(code_map))

        return code_map

    def get_salary_code(self, internal_code: str, system_type: str) -> str | None:
        """Single code lookup; answers from the cached map when one is held."""
        cached = self._cached_code_map(system_type)
        if cached is not None:
            return cached.get(internal_code)

        try:
            resp = self._table(SALARY_MAPPINGS_TABLE).get_item(
                Key={"PK": f"SYSTEM#{system_type}", "SK": f"CODE#{internal_code}"}
            )
        except ClientError as exc:
            raise MappingStoreError(
                f"Salary code lookup failed for code={internal_code!r}: {exc}"
            ) from exc
        item = resp.get("Item")
        if not item or not item.get("isActive", True):
            return None
        return item.get("externalCode") or None

    def invalidate_salary_codes(self, system_type: str) -> None:
        """Drop the cached code map so the next lookup reads DynamoDB."""
        if self._cache is not None:
            self._cache.delete(self._code_map_key(system_type))
            logger.debug("Invalidated cached salary codes for %s", system_type)


class DynamoDBExportLog:
    """IExportLog: one item per export run, stored as JSON.

    Recent runs are read through the ``createdAt`` index (partition
    ``entityType=EXPORT``, newest first).
    """

    ENTITY_TYPE = "EXPORT"

    def __init__(self, table_suffix: str = "", region: str = "eu-north-1",
                 endpoint_url: str | None = None) -> None:
        self._table = _resource(region, endpoint_url).Table(f"{EXPORTS_TABLE}{table_suffix}")

    def save(self, export: PayrollExport) -> None:
        try:
            self._table.put_item(Item={
                "PK": f"EXPORT#{export.id}",
                "SK": "EXPORT",
                "entityType": self.ENTITY_TYPE,
                "createdAt": export.created_at.isoformat(),
                "status": str(export.status),
                "payload": export.model_dump_json(),
            })
        except ClientError as exc:
            raise ExportLogError(f"Saving export {export.id} failed: {exc}") from exc
        logger.debug("Saved export %s (%s)", export.id, export.status)

    def get(self, export_id: str) -> PayrollExport:
        try:
            resp = self._table.get_item(Key={"PK": f"EXPORT#{export_id}", "SK": "EXPORT"})
        except ClientError as exc:
            raise ExportLogError(f"Reading export {export_id} failed: {exc}") from exc
        item = resp.get("Item")
        if item is None:
            raise ExportNotFoundError(export_id)
        return PayrollExport.model_validate_json(item["payload"])

    def list_recent(self, limit: int = 20) -> list[PayrollExport]:
        items: list[dict[str, Any]] = []
        kwargs: dict[str, Any] = {
            "IndexName": EXPORTS_CREATED_INDEX,
            "KeyConditionExpression": "entityType = :t",
            "ExpressionAttributeValues": {":t": self.ENTITY_TYPE},
            "ScanIndexForward": False,
            "Limit": limit,
        }
        try:
            while len(items) < limit:
                resp = self._table.query(**kwargs)
                items.extend(resp.get("Items", []))
                if "LastEvaluatedKey" not in resp:
                    break
                kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]
        except ClientError as exc:
            raise ExportLogError(f"Listing exports failed: {exc}") from exc
        return [PayrollExport.model_validate_json(i["payload"]) for i in items[:limit]]

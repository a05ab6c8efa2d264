"""Seed DynamoDB tables with sample employee ids and salary-code mappings.

Usage:
    python scripts/seed_dynamodb.py --endpoint-url http://localhost:4566
"""

from __future__ import annotations

import argparse
from typing import Any

import boto3

TABLE_DEFINITIONS: list[dict[str, Any]] = [
    {"name": "payroll-employee-external-ids"},
    {"name": "payroll-salary-type-mappings"},
    {
        "name": "payroll-exports",
        "index": {"name": "createdAt-index", "hash": "entityType", "range": "createdAt"},
    },
]

SAMPLE_EXTERNAL_IDS: list[dict[str, Any]] = [
    {"employeeId": "emp-001", "systemType": "tripletex", "externalId": "1001", "externalName": "Kari Nordmann"},
    {"employeeId": "emp-002", "systemType": "tripletex", "externalId": "1002", "externalName": "Ola Hansen"},
    {"employeeId": "emp-003", "systemType": "tripletex", "externalId": "1003", "isActive": False},
    {"employeeId": "emp-001", "systemType": "poweroffice", "externalId": "A-17"},
    {"employeeId": "emp-002", "systemType": "poweroffice", "externalId": "A-22"},
]

# internal code -> external code per system
SAMPLE_SALARY_CODES: dict[str, dict[str, str]] = {
    "tripletex": {
        "1000": "10",    # Timelønn
        "2010": "210",   # Kveldstillegg
        "2020": "220",   # Nattillegg
        "2030": "230",   # Helgetillegg lørdag
        "2040": "240",   # Helgetillegg søndag
        "3010": "310",   # Overtid 50%
        "3020": "320",   # Overtid 100%
    },
    "poweroffice": {
        "1000": "TL",
        "3010": "OT50",
        "3020": "OT100",
    },
}


def create_table_kwargs(table_name: str, index: dict[str, str] | None = None) -> dict[str, Any]:
    """PK/SK table, optionally with one string-keyed global secondary index."""
    attributes = {"PK", "SK"}
    kwargs: dict[str, Any] = {
        "TableName": table_name,
        "KeySchema": [
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        "BillingMode": "PAY_PER_REQUEST",
    }
    if index:
        attributes.update((index["hash"], index["range"]))
        kwargs["GlobalSecondaryIndexes"] = [{
            "IndexName": index["name"],
            "KeySchema": [
                {"AttributeName": index["hash"], "KeyType": "HASH"},
                {"AttributeName": index["range"], "KeyType": "RANGE"},
            ],
            "Projection": {"ProjectionType": "ALL"},
        }]
    kwargs["AttributeDefinitions"] = [
        {"AttributeName": name, "AttributeType": "S"} for name in sorted(attributes)
    ]
    return kwargs


def create_tables(ddb: Any, suffix: str = "") -> None:
    """Create all 3 DynamoDB tables. Skips if table already exists."""
    client = ddb.meta.client
    existing = client.list_tables().get("TableNames", [])

    for defn in TABLE_DEFINITIONS:
        table_name = f"{defn['name']}{suffix}"
        if table_name in existing:
            print(f"  Table {table_name} already exists, skipping")
            continue
        client.create_table(**create_table_kwargs(table_name, defn.get("index")))
        print(f"  Created table {table_name}")


def external_id_item(employee_id: str, system_type: str, external_id: str,
                     is_active: bool = True, external_name: str | None = None) -> dict[str, Any]:
    item: dict[str, Any] = {
        "PK": f"EMPLOYEE#{employee_id}", "SK": f"SYSTEM#{system_type}",
        "employeeId": employee_id, "systemType": system_type,
        "externalId": external_id, "isActive": is_active,
    }
    if external_name:
        item["externalName"] = external_name
    return item


def salary_code_item(internal_code: str, system_type: str, external_code: str,
                     is_active: bool = True) -> dict[str, Any]:
    return {
        "PK": f"SYSTEM#{system_type}", "SK": f"CODE#{internal_code}",
        "internalCode": internal_code, "systemType": system_type,
        "externalCode": external_code, "isActive": is_active,
    }


def seed_mapping_data(ddb: Any, suffix: str = "") -> None:
    """Seed sample external employee ids and salary-code mappings."""
    tbl = ddb.Table(f"payroll-employee-external-ids{suffix}")
    with tbl.batch_writer() as batch:
        for row in SAMPLE_EXTERNAL_IDS:
            batch.put_item(Item=external_id_item(
                row["employeeId"], row["systemType"], row["externalId"],
                is_active=row.get("isActive", True), external_name=row.get("externalName"),
            ))
    print(f"  Seeded {len(SAMPLE_EXTERNAL_IDS)} employee external ids")

    tbl = ddb.Table(f"payroll-salary-type-mappings{suffix}")
    count = 0
    with tbl.batch_writer() as batch:
        for system_type, codes in SAMPLE_SALARY_CODES.items():
            for internal, external in codes.items():
                batch.put_item(Item=salary_code_item(internal, system_type, external))
                count += 1
    print(f"  Seeded {count} salary-code mappings")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed DynamoDB tables for payroll-bridge")
    parser.add_argument("--endpoint-url", default=None, help="DynamoDB endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-suffix", default="", help="Table name suffix (e.g. -dev)")
    parser.add_argument("--region", default="eu-north-1", help="AWS region")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    ddb = boto3.resource("dynamodb", **kwargs)

    print("Creating tables...")
    create_tables(ddb, suffix=args.table_suffix)

    print("Seeding data...")
    seed_mapping_data(ddb, suffix=args.table_suffix)

    print("Done!")


if __name__ == "__main__":
    main()

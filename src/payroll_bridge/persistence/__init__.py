"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from dataclasses import dataclass

from payroll_bridge.core.config import AppSettings
from payroll_bridge.persistence.dynamodb_backend import DynamoDBExportLog, DynamoDBMappingStore
from payroll_bridge.persistence.memory_backend import (
    MemoryCacheBackend,
    MemoryExportLog,
    MemoryFileStore,
    MemoryMappingStore,
)
from payroll_bridge.persistence.protocols import ICacheBackend, IExportLog, IFileStore, IMappingStore
from payroll_bridge.persistence.redis_backend import RedisCacheBackend
from payroll_bridge.persistence.s3_backend import S3FileStore


@dataclass
class Persistence:
    mapping_store: IMappingStore
    cache: ICacheBackend | None
    file_store: IFileStore | None
    export_log: IExportLog


def create_persistence(settings: AppSettings | None = None) -> Persistence:
    """Create wired-up persistence backends from application settings.

    ``mapping_backend="memory"`` gives empty dict-backed stores for local
    development; ``"dynamodb"`` wires DynamoDB, Redis (when enabled) and S3.
    """
    if settings is None:
        settings = AppSettings()

    if settings.mapping_backend == "memory":
        return Persistence(
            mapping_store=MemoryMappingStore(),
            cache=MemoryCacheBackend(),
            file_store=MemoryFileStore() if settings.export.store_files else None,
            export_log=MemoryExportLog(),
        )

    cache: ICacheBackend | None = None
    if settings.redis.enabled:
        cache = RedisCacheBackend(
            host=settings.redis.host,
            port=settings.redis.port,
            db=settings.redis.db,
            key_prefix=settings.redis.key_prefix,
        )

    mapping_store = DynamoDBMappingStore(
        table_suffix=settings.dynamodb.table_suffix,
        region=settings.dynamodb.region,
        endpoint_url=settings.dynamodb.endpoint_url,
        cache=cache,
        cache_ttl=settings.redis.salary_code_ttl,
    )

    export_log = DynamoDBExportLog(
        table_suffix=settings.dynamodb.table_suffix,
        region=settings.dynamodb.region,
        endpoint_url=settings.dynamodb.endpoint_url,
    )

    file_store = None
    if settings.export.store_files:
        file_store = S3FileStore(
            bucket=settings.s3.bucket,
            region=settings.s3.region,
            endpoint_url=settings.s3.endpoint_url,
        )

    return Persistence(
        mapping_store=mapping_store, cache=cache, file_store=file_store, export_log=export_log,
    )

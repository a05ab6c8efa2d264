"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class DynamoDBConfig(BaseSettings):
    """DynamoDB configuration for the mapping tables and export log."""

    model_config = {"env_prefix": "PAYROLL_BRIDGE_DYNAMO_"}

    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "eu-north-1"
    endpoint_url: str | None = None  # LocalStack override


class RedisConfig(BaseSettings):
    """Redis cache configuration."""

    model_config = {"env_prefix": "PAYROLL_BRIDGE_REDIS_"}

    enabled: bool = False
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    salary_code_ttl: int = 300  # seconds
    key_prefix: str = "payroll-bridge:"


class S3Config(BaseSettings):
    """S3 storage for generated export files."""

    model_config = {"env_prefix": "PAYROLL_BRIDGE_S3_"}

    bucket: str = "payroll-bridge-exports"
    region: str = "eu-north-1"
    endpoint_url: str | None = None  # LocalStack override
    export_prefix: str = "exports"


class ExportConfig(BaseSettings):
    """File export conventions shared by every adapter."""

    model_config = {"env_prefix": "PAYROLL_BRIDGE_EXPORT_"}

    delimiter: str = ";"
    file_subject: str = "lonn"
    default_format: Literal["csv", "xlsx", "json", "xml"] = "csv"
    store_files: bool = False


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "PAYROLL_BRIDGE_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    mapping_backend: Literal["memory", "dynamodb"] = "memory"
    host: str = "0.0.0.0"
    port: int = 8000

    dynamodb: DynamoDBConfig = DynamoDBConfig()
    redis: RedisConfig = RedisConfig()
    s3: S3Config = S3Config()
    export: ExportConfig = ExportConfig()

"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class SourceConfig(BaseSettings):
    """Payroll workbook input configuration."""

    model_config = {"env_prefix": "SALARYSLIP_SOURCE_"}

    excel_path: str = "data/salary.xlsx"
    sheet_name: str = ""  # empty -> current "Month YYYY" sheet
    cache_capacity: int = 10
    batch_size: int = 1000


class RenderConfig(BaseSettings):
    """PDF output configuration."""

    model_config = {"env_prefix": "SALARYSLIP_RENDER_"}

    output_dir: str = "output"
    logo_path: str = "static/logo.png"
    max_workers: int = 4


class RetryConfig(BaseSettings):
    """Per-batch retry policy."""

    model_config = {"env_prefix": "SALARYSLIP_RETRY_"}

    max_attempts: int = 3
    delay_seconds: float = 5.0


class RetentionConfig(BaseSettings):
    """Output directory retention policy."""

    model_config = {"env_prefix": "SALARYSLIP_RETENTION_"}

    keep: int = 5
    prefix: str = "batch_"


class TrackerConfig(BaseSettings):
    """Batch status tracker configuration."""

    model_config = {"env_prefix": "SALARYSLIP_TRACKER_"}

    backend: Literal["memory", "redis"] = "memory"
    history: int = 10


class RedisConfig(BaseSettings):
    """Redis status store configuration."""

    model_config = {"env_prefix": "SALARYSLIP_REDIS_"}

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    key: str = "salaryslip:batches"


class NotifyConfig(BaseSettings):
    """Failure notification target (SNS topic)."""

    model_config = {"env_prefix": "SALARYSLIP_NOTIFY_"}

    topic_arn: str = ""  # empty -> notifications disabled
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class SchedulerConfig(BaseSettings):
    """Scheduled generation switches, read by the cron script and API lifespan."""

    model_config = {"env_prefix": "SALARYSLIP_SCHEDULER_"}

    enabled: bool = True
    generate_on_startup: bool = False


class CompanyConfig(BaseSettings):
    """Company details printed in the slip header."""

    model_config = {"env_prefix": "SALARYSLIP_COMPANY_"}

    name: str = "AVETA IVF"
    address_line1: str = "Rupaspur Ara Garden, Manglam Vihar Colony"
    address_line2: str = "B.V College, Patna - 800014"
    cin: str = ""
    level: str = ""


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "SALARYSLIP_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"

    source: SourceConfig = SourceConfig()
    render: RenderConfig = RenderConfig()
    retry: RetryConfig = RetryConfig()
    retention: RetentionConfig = RetentionConfig()
    tracker: TrackerConfig = TrackerConfig()
    redis: RedisConfig = RedisConfig()
    notify: NotifyConfig = NotifyConfig()
    scheduler: SchedulerConfig = SchedulerConfig()
    company: CompanyConfig = CompanyConfig()

"""
使用 Pydantic Settings 进行配置管理
从 app.properties 文件和环境变量加载配置
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from loguru import logger


class Settings(BaseSettings):
    """应用配置，包含参数校验"""

    # 外部指标提供方配置
    EXTERNAL_METRICS_MAX_AGE: int = Field(
        default=120,
        description="Maximum age (seconds) of a valid metric value before revalidation",
    )
    EXTERNAL_METRICS_BUCKET_SIZE: int = Field(
        default=300, description="Width (seconds) of the provider query window"
    )

    # 对账循环配置
    RECONCILE_INTERVAL: float = Field(
        default=30.0, description="Interval (seconds) between reconciliation passes"
    )
    STATS_INTERVAL: int = Field(
        default=60, description="Interval (seconds) between stats log lines"
    )
    POLICY_MANIFEST_PATH: Optional[str] = Field(
        default=None,
        description="YAML file or directory holding HorizontalPodAutoscaler manifests",
    )

    # 日志配置
    LOG_LEVEL: str = Field(default="INFO", description="Log level")
    LOG_FILE: Optional[str] = Field(default=None, description="Log file path")

    model_config = SettingsConfigDict(
        env_file="app.properties",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("EXTERNAL_METRICS_MAX_AGE")
    @classmethod
    def validate_max_age(cls, v: int) -> int:
        if v < 0:
            raise ValueError("EXTERNAL_METRICS_MAX_AGE must not be negative")
        return v

    @field_validator("EXTERNAL_METRICS_BUCKET_SIZE")
    @classmethod
    def validate_bucket_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("EXTERNAL_METRICS_BUCKET_SIZE must be at least 1")
        return v

    @field_validator("RECONCILE_INTERVAL")
    @classmethod
    def validate_reconcile_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("RECONCILE_INTERVAL must be positive")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v_upper


# ========== 配置获取函数 ==========


@lru_cache()
def get_settings() -> Settings:
    """
    获取配置实例（单例）

    返回:
        配置实例
    """
    settings = Settings()
    logger.info("Settings loaded")
    return settings


def reload_settings() -> Settings:
    """
    重新加载配置

    清除 lru_cache 缓存并重新加载配置

    返回:
        新的配置实例
    """
    get_settings.cache_clear()
    logger.info("Settings reloaded")
    return get_settings()

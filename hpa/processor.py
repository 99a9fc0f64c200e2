"""
外部指标处理器

负责指标记录的提取、基于新鲜度的刷新以及垃圾回收。
处理器只持有配置和校验器，一个实例即可服务所有对账周期。
"""

from typing import Collection, List, Optional, Sequence

from loguru import logger

from core.config import Settings, get_settings
from core.exceptions import InvalidConfigException
from core.models import ExternalMetricValue, HorizontalPodAutoscaler
from core.utils.time_utils import Clock, now_ts

from .extractor import extract_external_metrics
from .gc import compute_delete_external_metrics, compute_undeclared_external_metrics
from .staleness import StalenessPolicy
from .validator import ExternalMetricValidator


class Processor:
    """
    外部指标处理器

    对外接口:
    - process_hpa(): 策略 -> 已校验的记录
    - update_external_metrics(): 重新校验不新鲜的记录
    - compute_delete_external_metrics(): 已消失策略的记录
    """

    def __init__(
        self,
        validator: ExternalMetricValidator,
        max_age: int,
        clock: Clock = now_ts,
    ):
        """
        Args:
            validator: 所有查询使用的校验器
            max_age: 新鲜度窗口（秒），0 表示每轮都重新校验
            clock: 当前时间（epoch 秒）
        """
        if max_age < 0:
            raise InvalidConfigException("max_age", max_age, "must not be negative")

        self.validator = validator
        self.max_age = max_age
        self.staleness = StalenessPolicy(max_age)
        self.clock = clock

    @classmethod
    def from_settings(
        cls,
        validator: ExternalMetricValidator,
        settings: Optional[Settings] = None,
        clock: Clock = now_ts,
    ) -> "Processor":
        """根据应用配置创建处理器"""
        settings = settings or get_settings()
        return cls(validator, settings.EXTERNAL_METRICS_MAX_AGE, clock=clock)

    def process_hpa(
        self,
        hpa: HorizontalPodAutoscaler,
        metric_names: Optional[Collection[str]] = None,
    ) -> List[ExternalMetricValue]:
        """提取并校验策略声明的外部指标（可只提取指定指标名）"""
        return extract_external_metrics(
            hpa, self.validator, self.clock(), metric_names=metric_names
        )

    def update_external_metrics(
        self, records: Sequence[ExternalMetricValue]
    ) -> List[ExternalMetricValue]:
        """
        重新校验所有不新鲜的记录

        新鲜的记录保持不变。被重新校验的记录无论成功与否都会更新时间戳，
        提供方不可用时，记录在再次过期前不会被重复查询。

        Args:
            records: 已存储的记录，原地更新

        Returns:
            实际重新校验的记录，保持输入顺序
        """
        updated = []

        for record in records:
            now = self.clock()
            if self.staleness.is_fresh(record, now):
                continue

            record.valid = False
            record.last_updated = max(now, record.last_updated)
            record.value, record.valid, err = self.validator.validate(
                record.metric_name, record.labels
            )
            if err is not None:
                logger.debug(
                    f"Could not fetch the external metric {record.metric_name}, "
                    f"metric is no longer valid: {err}"
                )
            logger.debug(f"Updated the external metric {record!r}")
            updated.append(record)

        return updated

    @staticmethod
    def compute_delete_external_metrics(
        policies: Sequence[HorizontalPodAutoscaler],
        records: Sequence[ExternalMetricValue],
    ) -> List[ExternalMetricValue]:
        return compute_delete_external_metrics(policies, records)

    @staticmethod
    def compute_undeclared_external_metrics(
        policies: Sequence[HorizontalPodAutoscaler],
        records: Sequence[ExternalMetricValue],
    ) -> List[ExternalMetricValue]:
        return compute_undeclared_external_metrics(policies, records)

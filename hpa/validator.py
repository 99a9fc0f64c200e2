"""
外部指标校验 - 向指标提供方查询当前值
"""

import math
from typing import Dict, List, NamedTuple, Optional

from core.exceptions import (
    EmptySeriesError,
    InvalidMetricQueryError,
    MalformedSeriesError,
    ProviderQueryError,
    ValidationException,
)
from core.models import INT64_MAX, INT64_MIN
from core.utils.time_utils import Clock, now_ts
from core.ports import MetricPoint, MetricsProviderClient

DEFAULT_BUCKET_SIZE = 300


class ValidationResult(NamedTuple):
    """单次校验结果，valid 为 False 时 value 无意义"""

    value: int
    valid: bool
    error: Optional[ValidationException] = None


def build_query(metric_name: str, labels: Dict[str, str]) -> str:
    """
    构建带标签选择器的指标查询

    标签按键排序，同一选择器总是得到同一查询串，
    例如 ``nginx.net.request_per_s{app:web,env:prod}``。
    """
    tags = ",".join(f"{key}:{labels[key]}" for key in sorted(labels))
    return f"{metric_name}{{{tags}}}"


class ExternalMetricValidator:
    """
    外部指标校验器

    每次调用只向提供方查询一次，不缓存、不重试。
    失败通过返回值告知调用方，从不抛出，日志由调用方负责。
    """

    def __init__(
        self,
        client: MetricsProviderClient,
        bucket_size: int = DEFAULT_BUCKET_SIZE,
        clock: Clock = now_ts,
    ):
        """
        Args:
            client: 指标提供方客户端
            bucket_size: 查询窗口宽度（秒），窗口以当前时间结束
            clock: 当前时间（epoch 秒）
        """
        self.client = client
        self.bucket_size = bucket_size
        self.clock = clock

    def validate(self, metric_name: str, labels: Dict[str, str]) -> ValidationResult:
        """
        查询指标的当前值

        Args:
            metric_name: 外部指标名
            labels: 查询使用的标签选择器

        Returns:
            ValidationResult(value, valid, error)
        """
        try:
            value = self._query_external_metric(metric_name, labels)
        except ValidationException as e:
            return ValidationResult(0, False, e)
        return ValidationResult(value, True, None)

    def _query_external_metric(self, metric_name: str, labels: Dict[str, str]) -> int:
        if not metric_name:
            raise InvalidMetricQueryError(metric_name, "empty metric name")
        if not labels:
            raise InvalidMetricQueryError(metric_name, "empty label selector")

        query = build_query(metric_name, labels)
        now = self.clock()

        try:
            points = self.client.query_metrics(now - self.bucket_size, now, query)
        except Exception as e:
            raise ProviderQueryError(query, str(e)) from e

        return self._last_value(query, points)

    @staticmethod
    def _last_value(query: str, points: Optional[List[MetricPoint]]) -> int:
        """取序列最后一个点的值（截断为整数）"""
        if points is None:
            raise EmptySeriesError(query)

        try:
            if len(points) == 0:
                raise EmptySeriesError(query)
            last = points[-1]
            raw = last[1]
        except (TypeError, IndexError, KeyError) as e:
            raise MalformedSeriesError(query, f"unreadable series: {e!r}") from e

        if raw is None:
            raise MalformedSeriesError(query, "last point has no value")

        try:
            number = float(raw)
        except (TypeError, ValueError):
            raise MalformedSeriesError(query, f"non-numeric value {raw!r}")

        if math.isnan(number) or math.isinf(number):
            raise MalformedSeriesError(query, f"non-finite value {raw!r}")

        value = int(number)
        if value < INT64_MIN or value > INT64_MAX:
            raise MalformedSeriesError(query, f"value {raw!r} out of int64 range")
        return value

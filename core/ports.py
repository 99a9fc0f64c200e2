"""
外部协作方接口

指标提供方、持久化记录存储和策略监听都在本包之外实现，
通过这些接口注入。
"""
from abc import ABC, abstractmethod
from typing import List, NamedTuple, Optional

from .models import ExternalMetricValue, HorizontalPodAutoscaler, RecordKey


class MetricPoint(NamedTuple):
    """提供方序列中的一个点"""

    timestamp: int
    value: Optional[float]


class MetricsProviderClient(ABC):
    """外部指标提供方"""

    @abstractmethod
    def query_metrics(self, from_ts: int, to_ts: int, query: str) -> List[MetricPoint]:
        """
        在时间窗口内执行查询

        Args:
            from_ts: 窗口开始（epoch 秒）
            to_ts: 窗口结束（epoch 秒）
            query: 查询串

        Returns:
            按时间排序的序列点

        Raises:
            Exception: 传输、认证或提供方错误
        """
        pass


class PolicySource(ABC):
    """提供当前存活的自动扩缩容策略"""

    @abstractmethod
    def list_policies(self) -> List[HorizontalPodAutoscaler]:
        pass


class MetricStore(ABC):
    """指标记录的持久化存储"""

    @abstractmethod
    def list_records(self) -> List[ExternalMetricValue]:
        pass

    @abstractmethod
    def upsert(self, record: ExternalMetricValue) -> None:
        pass

    @abstractmethod
    def delete(self, key: RecordKey) -> None:
        """按 (namespace, name, uid, metric_name) 删除记录"""
        pass

"""
自动扩缩容策略的外部指标处理

- extractor: 策略 -> 指标记录
- validator: 每个指标一次提供方查询
- staleness: 新鲜度判断
- gc: 已消失策略 / 不再声明指标的记录
- processor: 以上功能的编排
"""

from .extractor import extract_external_metrics
from .gc import compute_delete_external_metrics, compute_undeclared_external_metrics
from .processor import Processor
from .staleness import StalenessPolicy
from .validator import ExternalMetricValidator, ValidationResult, build_query

__all__ = [
    "Processor",
    "ExternalMetricValidator",
    "ValidationResult",
    "StalenessPolicy",
    "build_query",
    "extract_external_metrics",
    "compute_delete_external_metrics",
    "compute_undeclared_external_metrics",
]

"""
外部指标提取 - 从自动扩缩容策略生成指标记录
"""

from typing import Collection, List, Optional

from loguru import logger

from core.enums import MetricSourceType
from core.models import (
    ExternalMetricSpec,
    ExternalMetricValue,
    HorizontalPodAutoscaler,
)

from .validator import ExternalMetricValidator


def extract_external_metrics(
    hpa: HorizontalPodAutoscaler,
    validator: ExternalMetricValidator,
    now: int,
    metric_names: Optional[Collection[str]] = None,
) -> List[ExternalMetricValue]:
    """
    将策略声明的外部指标转换为已校验的记录

    每个 ``External`` 条目生成一条记录，顺序与声明一致，其他类型跳过。
    每条记录在返回前都会校验一次。

    Args:
        hpa: 自动扩缩容策略
        validator: 首次校验使用的校验器
        now: 当前时间（epoch 秒）
        metric_names: 只提取这些指标名，None 表示全部

    Returns:
        首次校验后的记录列表，未声明指标时为空
    """
    if not hpa.spec.metrics:
        logger.error(
            f"Error processing {hpa.namespace}/{hpa.name}'s external metrics, empty list"
        )
        return []

    external_metrics = []
    for metric_spec in hpa.spec.metrics:
        if not isinstance(metric_spec, ExternalMetricSpec):
            if metric_names is not None:
                continue
            if metric_spec.source_type is MetricSourceType.EXTERNAL:
                logger.debug(
                    f"Skipping {hpa.namespace}/{hpa.name}'s External metric "
                    f"without an external source"
                )
            else:
                logger.debug(f"Unsupported metric type {metric_spec.type}")
            continue

        source = metric_spec.external
        if metric_names is not None and source.metric_name not in metric_names:
            continue

        record = ExternalMetricValue(
            metric_name=source.metric_name,
            labels=source.labels,
            valid=False,
            last_updated=now,
            owner=hpa.reference,
        )
        record.value, record.valid, err = validator.validate(
            record.metric_name, record.labels
        )
        if err is not None:
            logger.debug(
                f"Could not fetch the external metric {record.metric_name}, "
                f"metric is no longer valid: {err}"
            )
        external_metrics.append(record)

    return external_metrics

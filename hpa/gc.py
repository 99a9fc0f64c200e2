"""
指标记录的垃圾回收
"""

from typing import Dict, List, Sequence, Set

from core.models import ExternalMetricValue, HorizontalPodAutoscaler


def compute_delete_external_metrics(
    policies: Sequence[HorizontalPodAutoscaler],
    records: Sequence[ExternalMetricValue],
) -> List[ExternalMetricValue]:
    """
    不属于任何存活策略的记录

    纯函数，幂等：相同输入总是得到相同结果。

    Args:
        policies: 存活的自动扩缩容策略
        records: 已存储的指标记录

    Returns:
        所属 UID 不在存活策略中的记录
    """
    uids = {hpa.uid for hpa in policies}
    return [record for record in records if record.owner.uid not in uids]


def compute_undeclared_external_metrics(
    policies: Sequence[HorizontalPodAutoscaler],
    records: Sequence[ExternalMetricValue],
) -> List[ExternalMetricValue]:
    """
    所属策略仍存活但已不再声明该指标的记录

    已消失策略的记录由 ``compute_delete_external_metrics`` 处理。
    """
    declared: Dict[str, Set[str]] = {
        hpa.uid: {source.metric_name for source in hpa.external_metrics}
        for hpa in policies
    }
    return [
        record
        for record in records
        if record.owner.uid in declared
        and record.metric_name not in declared[record.owner.uid]
    ]

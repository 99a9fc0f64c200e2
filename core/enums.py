"""
枚举定义
"""

from enum import Enum


class MetricSourceType(str, Enum):
    """自动扩缩容策略可声明的指标来源类型"""

    OBJECT = "Object"  # 单个集群对象的指标
    PODS = "Pods"  # 目标所有 Pod 的平均指标
    RESOURCE = "Resource"  # 集群已知的 CPU / 内存
    EXTERNAL = "External"  # 集群外部的指标

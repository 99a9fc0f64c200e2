"""
外部指标缓存的对账循环

- MetricsReconciler: 单轮对账（回收、提取、刷新、持久化）
- ReconcilerDaemon: 串行执行对账的后台线程
- ManifestPolicySource: 从 YAML 清单读取策略
- Observers: 对账监控（日志、计数）
"""

from .bootstrap import create_daemon, create_reconciler, serve
from .daemon import ReconcilerDaemon
from .observers import LoggingObserver, MetricsObserver, ReconcileObserver
from .reconciler import MetricsReconciler
from .sources import ManifestPolicySource
from .types import ReconcileResult

__all__ = [
    "MetricsReconciler",
    "ReconcilerDaemon",
    "ManifestPolicySource",
    "ReconcileResult",
    "ReconcileObserver",
    "LoggingObserver",
    "MetricsObserver",
    "create_reconciler",
    "create_daemon",
    "serve",
]

"""
根据应用配置组装对账循环

指标提供方客户端和记录存储由宿主进程提供，其余组件由配置创建。
"""

import signal
import threading
from typing import List, Optional

from loguru import logger

from core.config import Settings, get_settings
from core.exceptions import InvalidConfigException
from core.ports import MetricStore, MetricsProviderClient, PolicySource
from core.utils.logger import setup_logger
from hpa.processor import Processor
from hpa.validator import ExternalMetricValidator

from .daemon import ReconcilerDaemon
from .observers import ReconcileObserver
from .reconciler import MetricsReconciler
from .sources import ManifestPolicySource


def create_reconciler(
    client: MetricsProviderClient,
    store: MetricStore,
    policy_source: Optional[PolicySource] = None,
    settings: Optional[Settings] = None,
    observers: List[ReconcileObserver] = None,
) -> MetricsReconciler:
    """
    根据配置创建对账器

    Args:
        client: 外部指标提供方客户端
        store: 持久化记录存储
        policy_source: 策略来源（默认读取 POLICY_MANIFEST_PATH 清单）
        settings: 配置（默认 get_settings()）
        observers: 对账观察者

    Returns:
        MetricsReconciler 实例
    """
    settings = settings or get_settings()

    if policy_source is None:
        if not settings.POLICY_MANIFEST_PATH:
            raise InvalidConfigException(
                "POLICY_MANIFEST_PATH", None, "required when no policy source is given"
            )
        policy_source = ManifestPolicySource(settings.POLICY_MANIFEST_PATH)

    validator = ExternalMetricValidator(
        client, bucket_size=settings.EXTERNAL_METRICS_BUCKET_SIZE
    )
    processor = Processor.from_settings(validator, settings)
    return MetricsReconciler(processor, policy_source, store, observers=observers)


def create_daemon(
    reconciler: MetricsReconciler, settings: Optional[Settings] = None
) -> ReconcilerDaemon:
    settings = settings or get_settings()
    return ReconcilerDaemon(
        reconciler,
        check_interval=settings.RECONCILE_INTERVAL,
        stats_interval=settings.STATS_INTERVAL,
    )


def serve(
    client: MetricsProviderClient,
    store: MetricStore,
    policy_source: Optional[PolicySource] = None,
) -> None:
    """运行对账守护线程，直到收到 SIGTERM / SIGINT"""
    settings = get_settings()
    setup_logger(settings.LOG_LEVEL, settings.LOG_FILE)

    logger.info("=" * 70)
    logger.info("External metrics reconciler")
    logger.info(f"Max age: {settings.EXTERNAL_METRICS_MAX_AGE}s")
    logger.info(f"Query bucket: {settings.EXTERNAL_METRICS_BUCKET_SIZE}s")
    logger.info(f"Interval: {settings.RECONCILE_INTERVAL}s")
    logger.info("=" * 70)

    reconciler = create_reconciler(client, store, policy_source, settings)
    daemon = create_daemon(reconciler, settings)

    stop_event = threading.Event()

    def signal_handler(signum, frame):
        logger.info(f"🛑 Received signal {signum}, shutting down...")
        daemon.stop()
        stop_event.set()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    daemon.start()

    try:
        stop_event.wait()
    except KeyboardInterrupt:
        logger.info("⚠️  Keyboard interrupt received")
        daemon.stop()

    daemon.join(timeout=10)
    logger.info("✅ External metrics reconciler stopped")

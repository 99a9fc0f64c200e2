"""
对账守护进程 - 周期性对账

在单个线程中周期性执行对账，同一时刻最多只有一轮对账在执行。
"""

import time
import threading

from core.utils.logger import get_logger

from .observers import MetricsObserver
from .reconciler import MetricsReconciler

logger = get_logger("reconciler")


class ReconcilerDaemon(threading.Thread):
    """对账守护进程"""

    def __init__(
        self,
        reconciler: MetricsReconciler,
        check_interval: float = 30.0,
        stats_interval: int = 60,
    ):
        """
        Args:
            reconciler: MetricsReconciler 实例
            check_interval: 对账间隔（秒）
            stats_interval: 统计日志间隔（秒）
        """
        super().__init__(daemon=True, name="ReconcilerDaemon")
        self.reconciler = reconciler
        self.check_interval = check_interval
        self.stats_interval = stats_interval
        self.stats = MetricsObserver()
        self.reconciler.add_observer(self.stats)
        self._stop_event = threading.Event()
        self._last_stats_time = 0

    def run(self):
        """主循环"""
        logger.info(f"Reconciler daemon started (interval: {self.check_interval}s)")

        while not self._stop_event.is_set():
            try:
                self.reconciler.reconcile()

                current_time = int(time.time())
                if current_time - self._last_stats_time >= self.stats_interval:
                    self._log_stats()
                    self._last_stats_time = current_time

            except Exception as e:
                logger.exception(f"Reconciler daemon error: {e}")

            self._stop_event.wait(self.check_interval)

        logger.info("Reconciler daemon stopped")

    def stop(self):
        """停止守护进程"""
        self._stop_event.set()

    def _log_stats(self):
        stats = self.stats.get_metrics()
        logger.info(
            f"📊 Passes: {stats['total_passes']} "
            f"({stats['total_failures']} failed), "
            f"extracted: {stats['total_extracted']}, "
            f"refreshed: {stats['total_refreshed']}, "
            f"deleted: {stats['total_deleted']}, "
            f"invalid: {stats['total_invalid']}"
        )

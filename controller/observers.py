"""
对账观察者 - 执行监控
"""

from abc import ABC, abstractmethod

from loguru import logger

from .types import ReconcileResult


class ReconcileObserver(ABC):
    """对账观察者接口"""

    @abstractmethod
    def on_pass_completed(self, result: ReconcileResult):
        """对账成功时调用"""
        pass

    @abstractmethod
    def on_pass_failed(self, result: ReconcileResult):
        """对账失败时调用"""
        pass


class LoggingObserver(ReconcileObserver):
    """日志观察者（默认）"""

    def on_pass_completed(self, result: ReconcileResult):
        if result.records_touched or result.records_deleted:
            logger.info(
                f"✓ Reconciled {result.policies_seen} policies: "
                f"{result.records_extracted} extracted, "
                f"{result.records_refreshed} refreshed, "
                f"{result.records_deleted} deleted, "
                f"{result.records_invalid} invalid "
                f"({result.execution_time:.3f}s)"
            )
        if result.records_invalid > 10:
            logger.warning(
                f"⚠️  {result.records_invalid} external metrics could not be validated "
                f"(may indicate provider issues)"
            )

    def on_pass_failed(self, result: ReconcileResult):
        logger.error(f"✗ Reconciliation failed: {result.error_message}")


class MetricsObserver(ReconcileObserver):
    """指标收集观察者"""

    def __init__(self):
        self.metrics = {
            "total_passes": 0,
            "total_success": 0,
            "total_failures": 0,
            "total_extracted": 0,
            "total_refreshed": 0,
            "total_deleted": 0,
            "total_invalid": 0,
        }

    def on_pass_completed(self, result: ReconcileResult):
        self.metrics["total_passes"] += 1
        self.metrics["total_success"] += 1
        self.metrics["total_extracted"] += result.records_extracted
        self.metrics["total_refreshed"] += result.records_refreshed
        self.metrics["total_deleted"] += result.records_deleted
        self.metrics["total_invalid"] += result.records_invalid

    def on_pass_failed(self, result: ReconcileResult):
        self.metrics["total_passes"] += 1
        self.metrics["total_failures"] += 1

    def get_metrics(self) -> dict:
        """获取收集的指标"""
        return self.metrics.copy()

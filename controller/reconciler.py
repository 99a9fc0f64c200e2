"""
指标对账器 - 对记录存储执行一轮对账

每轮步骤:
1. 删除已消失策略的记录以及不再声明的指标
2. 为新出现的策略（或新增的指标）提取记录
3. 重新校验不新鲜的已存储记录
4. 只持久化本轮改动过的记录
"""

import time
from typing import List, Optional, Set, Tuple

from core.models import ExternalMetricValue, HorizontalPodAutoscaler
from core.ports import MetricStore, PolicySource
from core.utils.logger import get_logger
from hpa.processor import Processor

from .observers import LoggingObserver, ReconcileObserver
from .types import ReconcileResult

logger = get_logger("reconciler")


class MetricsReconciler:
    """
    驱动处理器完成策略源与记录存储之间的对账

    对账轮次必须由调用方串行执行（守护线程单线程运行），
    对账器只保存已提取过的策略 UID 集合。
    """

    def __init__(
        self,
        processor: Processor,
        policy_source: PolicySource,
        store: MetricStore,
        observers: List[ReconcileObserver] = None,
    ):
        """
        Args:
            processor: 外部指标处理器
            policy_source: 存活策略来源
            store: 持久化记录存储
            observers: 对账观察者（默认 LoggingObserver）
        """
        self.processor = processor
        self.policy_source = policy_source
        self.store = store
        self.observers: List[ReconcileObserver] = observers or [LoggingObserver()]
        self._extracted_uids: Set[str] = set()

    def add_observer(self, observer: ReconcileObserver):
        """添加观察者"""
        self.observers.append(observer)
        logger.debug(f"Added observer: {observer.__class__.__name__}")

    def reconcile(self) -> ReconcileResult:
        """
        执行一轮对账

        策略源或存储失败会中止本轮并记录在结果中，不会抛出。

        Returns:
            对账结果
        """
        start_time = time.time()

        try:
            result = self._do_reconcile()
        except Exception as e:
            logger.exception(f"Reconciliation pass failed: {e}")
            result = ReconcileResult(success=False, error_message=str(e))

        result.execution_time = time.time() - start_time
        self._notify_observers(result)
        return result

    def _do_reconcile(self) -> ReconcileResult:
        policies = self.policy_source.list_policies()
        records = self.store.list_records()
        result = ReconcileResult(policies_seen=len(policies))

        # 1. 垃圾回收
        remaining = self._delete_stale_records(policies, records)
        result.records_deleted = len(records) - len(remaining)

        # 2. 提取
        to_extract = self._policies_to_extract(policies, remaining)
        fully_extracted = {hpa.uid for hpa, names in to_extract if names is None}
        touched: List[ExternalMetricValue] = []
        for hpa, names in to_extract:
            new_records = self.processor.process_hpa(hpa, metric_names=names)
            logger.debug(
                f"Extracted {len(new_records)} external metrics from "
                f"{hpa.namespace}/{hpa.name}"
            )
            touched.extend(new_records)
        result.records_extracted = len(touched)
        extracted_keys = {r.key for r in touched}

        # 3. 刷新，跳过本轮刚提取的记录
        refreshable = [
            r
            for r in remaining
            if r.owner.uid not in fully_extracted and r.key not in extracted_keys
        ]
        refreshed = self.processor.update_external_metrics(refreshable)
        result.records_refreshed = len(refreshed)
        touched.extend(refreshed)

        # 4. 持久化
        for record in touched:
            self.store.upsert(record)
        result.records_invalid = sum(1 for r in touched if not r.valid)

        self._extracted_uids = {hpa.uid for hpa in policies} & (
            self._extracted_uids | fully_extracted
        )
        return result

    def _delete_stale_records(
        self,
        policies: List[HorizontalPodAutoscaler],
        records: List[ExternalMetricValue],
    ) -> List[ExternalMetricValue]:
        """删除孤儿记录和不再声明的记录，返回保留的记录"""
        stale = self.processor.compute_delete_external_metrics(policies, records)
        stale += self.processor.compute_undeclared_external_metrics(policies, records)

        deleted_keys = set()
        for record in stale:
            logger.debug(
                f"Deleting external metric {record.metric_name} of "
                f"{record.owner.namespace}/{record.owner.name} ({record.owner.uid})"
            )
            self.store.delete(record.key)
            deleted_keys.add(record.key)

        return [r for r in records if r.key not in deleted_keys]

    def _policies_to_extract(
        self,
        policies: List[HorizontalPodAutoscaler],
        records: List[ExternalMetricValue],
    ) -> List[Tuple[HorizontalPodAutoscaler, Optional[Set[str]]]]:
        """
        需要提取的策略

        从未提取过的策略整体提取（指标名为 None），
        已提取过的策略只提取没有存储记录的指标。
        """
        stored = {(r.owner.uid, r.metric_name) for r in records}
        result = []
        for hpa in policies:
            if hpa.uid not in self._extracted_uids:
                result.append((hpa, None))
                continue
            missing = {
                source.metric_name
                for source in hpa.external_metrics
                if (hpa.uid, source.metric_name) not in stored
            }
            if missing:
                logger.debug(
                    f"{hpa.namespace}/{hpa.name} declares new external metrics "
                    f"{sorted(missing)}"
                )
                result.append((hpa, missing))
        return result

    def _notify_observers(self, result: ReconcileResult):
        """通知所有观察者"""
        if result.success:
            for observer in self.observers:
                observer.on_pass_completed(result)
        else:
            for observer in self.observers:
                observer.on_pass_failed(result)

"""
对账结果类型定义
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ReconcileResult:
    """单轮对账结果"""

    policies_seen: int = 0
    records_extracted: int = 0
    records_refreshed: int = 0
    records_deleted: int = 0
    records_invalid: int = 0  # 本轮改动后仍无效的记录数
    success: bool = True
    error_message: Optional[str] = None
    execution_time: float = 0.0  # 秒

    @property
    def records_touched(self) -> int:
        return self.records_extracted + self.records_refreshed

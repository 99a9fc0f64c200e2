"""
外部指标缓存值的新鲜度策略
"""

from core.models import ExternalMetricValue
from core.utils.time_utils import seconds_since


class StalenessPolicy:
    """
    判断缓存值能否不经重新校验直接复用

    记录有效且不超过 ``max_age`` 秒时才算新鲜。
    ``max_age == 0`` 表示不复用，每轮都重新校验。
    """

    def __init__(self, max_age: int):
        self.max_age = max_age

    def is_fresh(self, record: ExternalMetricValue, now: int) -> bool:
        if self.max_age <= 0 or not record.valid:
            return False
        return seconds_since(record.last_updated, now) <= self.max_age

    def needs_refresh(self, record: ExternalMetricValue, now: int) -> bool:
        return not self.is_fresh(record, now)

"""
外部指标缓存的自定义异常
"""
from typing import Any


class MetricsCacheException(Exception):
    """外部指标缓存基础异常类"""
    pass


# ========== 校验异常 ==========

class ValidationException(MetricsCacheException):
    """外部指标校验失败异常基类"""
    pass


class InvalidMetricQueryError(ValidationException):
    """指标无法构建查询异常"""
    def __init__(self, metric_name: str, reason: str):
        self.metric_name = metric_name
        super().__init__(f"Invalid metric query for '{metric_name}': {reason}")


class ProviderQueryError(ValidationException):
    """提供方查询失败异常"""
    def __init__(self, query: str, detail: str):
        self.query = query
        super().__init__(f"Error while executing metric query {query}: {detail}")


class EmptySeriesError(ValidationException):
    """查询结果为空异常"""
    def __init__(self, query: str):
        self.query = query
        super().__init__(f"Returned series is empty for query {query}")


class MalformedSeriesError(ValidationException):
    """查询结果无法解析异常"""
    def __init__(self, query: str, detail: str):
        self.query = query
        super().__init__(f"Malformed series for query {query}: {detail}")


# ========== 配置异常 ==========

class ConfigurationException(MetricsCacheException):
    """配置相关异常基类"""
    pass


class InvalidConfigException(ConfigurationException):
    """无效配置异常"""
    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration: {key}={value} - {reason}"
        )


# ========== 策略来源异常 ==========

class PolicySourceException(MetricsCacheException):
    """策略来源读取失败异常"""
    def __init__(self, source: str, detail: str):
        self.source = source
        super().__init__(f"Policy source {source} failed: {detail}")

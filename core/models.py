"""
自动扩缩容策略与外部指标缓存值的 Pydantic 模型
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import MetricSourceType

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# (namespace, name, uid, metric_name)
RecordKey = Tuple[str, str, str, str]


class ObjectReference(BaseModel):
    """指标值所属的自动扩缩容策略引用"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Policy object name")
    namespace: str = Field(..., description="Policy object namespace")
    uid: str = Field(..., description="Policy object UID")


class LabelSelector(BaseModel):
    """外部指标查询的标签选择器"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    match_labels: Dict[str, str] = Field(default_factory=dict, alias="matchLabels")


class ExternalMetricSource(BaseModel):
    """
    策略声明的外部指标

    同时接受扁平结构（``metricName`` / ``metricSelector``）
    和新版本 API 的 ``metric: {name, selector}`` 嵌套结构。
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    metric_name: str = Field(..., alias="metricName")
    metric_selector: LabelSelector = Field(
        default_factory=LabelSelector, alias="metricSelector"
    )

    @model_validator(mode="before")
    @classmethod
    def flatten_metric_identifier(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("metric"), dict):
            metric = data["metric"]
            data = {
                "metricName": metric.get("name"),
                "metricSelector": metric.get("selector") or {},
            }
        return data

    @property
    def labels(self) -> Dict[str, str]:
        return dict(self.metric_selector.match_labels)


class ExternalMetricSpec(BaseModel):
    """类型为 ``External`` 的指标条目"""

    model_config = ConfigDict(extra="ignore")

    type: Literal["External"]
    external: ExternalMetricSource


class UnsupportedMetricSpec(BaseModel):
    """其他类型的指标条目（不处理）"""

    model_config = ConfigDict(extra="ignore")

    type: str

    @property
    def source_type(self) -> Optional[MetricSourceType]:
        """已知的指标来源类型，未知类型返回 None"""
        try:
            return MetricSourceType(self.type)
        except ValueError:
            return None


MetricSpec = Annotated[
    Union[ExternalMetricSpec, UnsupportedMetricSpec],
    Field(union_mode="left_to_right"),
]


class HorizontalPodAutoscalerSpec(BaseModel):
    model_config = ConfigDict(extra="ignore")

    metrics: List[MetricSpec] = Field(default_factory=list)


class HorizontalPodAutoscaler(BaseModel):
    """自动扩缩容策略，只保留指标缓存需要的字段"""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    namespace: str = Field(default="default")
    uid: str = Field(..., min_length=1)
    spec: HorizontalPodAutoscalerSpec = Field(
        default_factory=HorizontalPodAutoscalerSpec
    )

    @classmethod
    def from_manifest(cls, manifest: Dict[str, Any]) -> "HorizontalPodAutoscaler":
        """
        从 Kubernetes 清单构建策略

        metadata 不是映射时按缺失处理，由模型校验报错。

        Args:
            manifest: 解析后的 HorizontalPodAutoscaler 文档

        Returns:
            HorizontalPodAutoscaler 模型

        Raises:
            pydantic.ValidationError: 清单不是合法的策略
        """
        metadata = manifest.get("metadata")
        if not isinstance(metadata, dict):
            metadata = {}
        return cls.model_validate(
            {
                "name": metadata.get("name"),
                "namespace": metadata.get("namespace") or "default",
                "uid": metadata.get("uid"),
                "spec": manifest.get("spec") or {},
            }
        )

    @property
    def reference(self) -> ObjectReference:
        return ObjectReference(name=self.name, namespace=self.namespace, uid=self.uid)

    @property
    def external_metrics(self) -> List[ExternalMetricSource]:
        """策略声明的外部指标，保持声明顺序"""
        return [
            m.external for m in self.spec.metrics if isinstance(m, ExternalMetricSpec)
        ]


class ExternalMetricValue(BaseModel):
    """
    某个策略的某个外部指标的缓存值

    只有 ``valid`` 为真时 ``value`` 才有意义，
    用于扩缩容决策时请调用 ``usable_value()``。
    """

    model_config = ConfigDict(validate_assignment=True)

    metric_name: str = Field(..., description="External metric name")
    labels: Dict[str, str] = Field(default_factory=dict, description="Query labels")
    value: int = Field(default=0, ge=INT64_MIN, le=INT64_MAX)
    valid: bool = Field(default=False, description="Last validation succeeded")
    last_updated: int = Field(..., description="Last validation attempt (epoch seconds)")
    owner: ObjectReference

    @property
    def key(self) -> RecordKey:
        """记录在存储中的键"""
        return (self.owner.namespace, self.owner.name, self.owner.uid, self.metric_name)

    def usable_value(self) -> Optional[int]:
        """下游使用的值，None 表示没有数据"""
        return self.value if self.valid else None

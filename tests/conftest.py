"""
Shared fixtures and stubs for the metrics cache tests

- FakeClock: settable epoch-second clock
- StubProviderClient: scripted (value, error) responses, records every query
- InMemoryStore: dict-backed MetricStore
- log capture through a temporary loguru sink
"""

from typing import Dict, List, Optional, Tuple

import pytest
from loguru import logger

from core.models import ExternalMetricValue, HorizontalPodAutoscaler, ObjectReference
from core.ports import MetricPoint, MetricsProviderClient, MetricStore, PolicySource
from hpa.processor import Processor
from hpa.validator import ExternalMetricValidator

T0 = 1_700_000_000


class FakeClock:
    def __init__(self, now: int = T0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        self.now += seconds
        return self.now


class StubProviderClient(MetricsProviderClient):
    """
    Provider stub

    Each query consumes the next scripted ``(value, error)`` pair; the last
    pair is repeated once the script is exhausted. A non-None error is
    raised, otherwise a one-point series holding ``value`` is returned.
    """

    def __init__(self, script: List[Tuple[Optional[float], Optional[Exception]]] = None):
        self.script = list(script or [(42, None)])
        self.queries: List[Tuple[int, int, str]] = []

    def query_metrics(self, from_ts: int, to_ts: int, query: str) -> List[MetricPoint]:
        self.queries.append((from_ts, to_ts, query))
        if len(self.script) > 1:
            value, error = self.script.pop(0)
        else:
            value, error = self.script[0]
        if error is not None:
            raise error
        return [MetricPoint(to_ts, value)]

    @property
    def calls(self) -> int:
        return len(self.queries)


class SeriesByMetricClient(StubProviderClient):
    """Returns a fixed response for the listed metric names, scripted points otherwise"""

    def __init__(self, responses: Dict[str, object]):
        super().__init__()
        self.responses = responses

    def query_metrics(self, from_ts: int, to_ts: int, query: str):
        metric_name = query.split("{", 1)[0]
        if metric_name not in self.responses:
            return super().query_metrics(from_ts, to_ts, query)
        self.queries.append((from_ts, to_ts, query))
        return self.responses[metric_name]


class InMemoryStore(MetricStore):
    def __init__(self, records: List[ExternalMetricValue] = None):
        self.records: Dict[tuple, ExternalMetricValue] = {r.key: r for r in records or []}
        self.upserts: List[ExternalMetricValue] = []
        self.deletes: List[tuple] = []

    def list_records(self) -> List[ExternalMetricValue]:
        return list(self.records.values())

    def upsert(self, record: ExternalMetricValue) -> None:
        self.upserts.append(record)
        self.records[record.key] = record

    def delete(self, key: tuple) -> None:
        self.deletes.append(key)
        self.records.pop(key, None)


class StaticPolicySource(PolicySource):
    def __init__(self, policies: List[HorizontalPodAutoscaler] = None):
        self.policies = list(policies or [])

    def list_policies(self) -> List[HorizontalPodAutoscaler]:
        return list(self.policies)


def make_hpa(uid: str, metrics: List[dict] = None, name: str = None, namespace: str = "default"):
    """Build a policy from raw metric spec entries (Kubernetes shape)"""
    return HorizontalPodAutoscaler.model_validate(
        {
            "name": name or f"hpa-{uid}",
            "namespace": namespace,
            "uid": uid,
            "spec": {"metrics": metrics if metrics is not None else []},
        }
    )


def external(metric_name: str, **labels) -> dict:
    return {
        "type": "External",
        "external": {
            "metricName": metric_name,
            "metricSelector": {"matchLabels": labels or {"app": "web"}},
        },
    }


def make_record(
    uid: str,
    metric_name: str = "requests",
    valid: bool = True,
    value: int = 10,
    last_updated: int = T0,
    labels: Dict[str, str] = None,
) -> ExternalMetricValue:
    return ExternalMetricValue(
        metric_name=metric_name,
        labels=labels or {"app": "web"},
        value=value,
        valid=valid,
        last_updated=last_updated,
        owner=ObjectReference(name=f"hpa-{uid}", namespace="default", uid=uid),
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def provider():
    return StubProviderClient()


@pytest.fixture
def validator(provider, clock):
    return ExternalMetricValidator(provider, bucket_size=300, clock=clock)


@pytest.fixture
def processor(validator, clock):
    return Processor(validator, max_age=120, clock=clock)


@pytest.fixture
def log_messages():
    """Capture loguru output as 'LEVEL message' strings"""
    messages: List[str] = []
    handler_id = logger.add(
        lambda message: messages.append(message.rstrip("\n")),
        level="DEBUG",
        format="{level} {message}",
    )
    yield messages
    logger.remove(handler_id)

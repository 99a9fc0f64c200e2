"""Tests for the reconciliation pass"""

from controller.observers import MetricsObserver
from controller.reconciler import MetricsReconciler
from hpa.processor import Processor
from hpa.validator import ExternalMetricValidator

from conftest import (
    T0,
    InMemoryStore,
    SeriesByMetricClient,
    StaticPolicySource,
    StubProviderClient,
    external,
    make_hpa,
    make_record,
)


class FailingStore(InMemoryStore):
    def list_records(self):
        raise ConnectionError("store unavailable")


def make_reconciler(processor, policies, store):
    metrics = MetricsObserver()
    reconciler = MetricsReconciler(
        processor, StaticPolicySource(policies), store, observers=[metrics]
    )
    return reconciler, metrics


def test_first_pass_extracts_new_policies(processor):
    store = InMemoryStore()
    hpa = make_hpa("A", [external("requests"), external("errors")])
    reconciler, _ = make_reconciler(processor, [hpa], store)

    result = reconciler.reconcile()

    assert result.success is True
    assert result.records_extracted == 2
    assert result.records_refreshed == 0
    assert sorted(k[3] for k in store.records) == ["errors", "requests"]


def test_second_pass_persists_only_touched_records(processor, provider, clock):
    store = InMemoryStore()
    reconciler, _ = make_reconciler(processor, [make_hpa("A", [external("requests")])], store)
    reconciler.reconcile()
    store.upserts.clear()

    clock.advance(60)
    fresh_pass = reconciler.reconcile()
    clock.advance(61)
    stale_pass = reconciler.reconcile()

    assert fresh_pass.records_touched == 0
    assert stale_pass.records_refreshed == 1
    assert len(store.upserts) == 1
    assert store.upserts[0].last_updated == T0 + 121
    assert provider.calls == 2


def test_orphaned_records_are_deleted(processor):
    orphan = make_record("C")
    store = InMemoryStore([make_record("A", last_updated=T0), orphan])
    reconciler, _ = make_reconciler(processor, [make_hpa("A", [external("requests")])], store)

    result = reconciler.reconcile()

    assert result.records_deleted == 1
    assert store.deletes == [orphan.key]
    assert orphan.key not in store.records


def test_undeclared_metric_is_deleted_and_new_one_extracted(processor):
    store = InMemoryStore()
    policy = make_hpa("A", [external("requests")])
    source = StaticPolicySource([policy])
    reconciler = MetricsReconciler(processor, source, store)
    reconciler.reconcile()

    source.policies = [make_hpa("A", [external("latency")])]
    result = reconciler.reconcile()

    assert result.records_deleted == 1
    assert result.records_extracted == 1
    assert [k[3] for k in store.records] == ["latency"]


def test_empty_policy_is_extracted_once(processor, log_messages):
    store = InMemoryStore()
    reconciler, _ = make_reconciler(processor, [make_hpa("A", [])], store)

    reconciler.reconcile()
    reconciler.reconcile()

    errors = [m for m in log_messages if m.startswith("ERROR Error processing")]
    assert len(errors) == 1
    assert store.records == {}


def test_invalid_records_are_counted(clock):
    client = StubProviderClient([(None, ConnectionError("down"))])
    processor = Processor(ExternalMetricValidator(client, clock=clock), 120, clock=clock)
    store = InMemoryStore()
    reconciler, metrics = make_reconciler(
        processor, [make_hpa("A", [external("requests")])], store
    )

    result = reconciler.reconcile()

    assert result.records_invalid == 1
    assert metrics.get_metrics()["total_invalid"] == 1
    assert list(store.records.values())[0].valid is False


def test_store_failure_is_reported_not_raised(processor):
    reconciler, metrics = make_reconciler(processor, [make_hpa("A")], FailingStore())

    result = reconciler.reconcile()

    assert result.success is False
    assert "store unavailable" in result.error_message
    assert metrics.get_metrics()["total_failures"] == 1


def test_records_of_removed_policy_are_collected(processor):
    store = InMemoryStore()
    source = StaticPolicySource([make_hpa("A", [external("requests")]), make_hpa("B", [external("requests")])])
    reconciler = MetricsReconciler(processor, source, store)
    reconciler.reconcile()

    source.policies = source.policies[:1]
    result = reconciler.reconcile()

    assert result.records_deleted == 1
    assert {k[2] for k in store.records} == {"A"}


def test_added_metric_is_extracted_without_revalidating_fresh_siblings(
    processor, provider, clock
):
    store = InMemoryStore()
    source = StaticPolicySource([make_hpa("A", [external("requests")])])
    reconciler = MetricsReconciler(processor, source, store)
    reconciler.reconcile()
    store.upserts.clear()

    clock.advance(10)
    source.policies = [make_hpa("A", [external("requests"), external("errors")])]
    result = reconciler.reconcile()

    assert result.records_extracted == 1
    assert result.records_refreshed == 0
    assert [r.metric_name for r in store.upserts] == ["errors"]
    assert provider.calls == 2
    assert provider.queries[-1][2] == "errors{app:web}"


def test_stale_sibling_of_added_metric_is_refreshed(processor, provider, clock):
    store = InMemoryStore()
    source = StaticPolicySource([make_hpa("A", [external("requests")])])
    reconciler = MetricsReconciler(processor, source, store)
    reconciler.reconcile()

    clock.advance(121)
    source.policies = [make_hpa("A", [external("requests"), external("errors")])]
    result = reconciler.reconcile()

    assert result.records_extracted == 1
    assert result.records_refreshed == 1
    assert provider.calls == 3


def test_malformed_response_does_not_abort_the_pass(clock):
    client = SeriesByMetricClient({"broken": [{"timestamp": T0, "value": 3.0}]})
    processor = Processor(ExternalMetricValidator(client, clock=clock), 120, clock=clock)
    store = InMemoryStore()
    policies = [make_hpa("A", [external("broken")]), make_hpa("B", [external("requests")])]
    reconciler, _ = make_reconciler(processor, policies, store)
    reconciler.reconcile()

    clock.advance(121)
    result = reconciler.reconcile()

    assert result.success is True
    assert result.records_refreshed == 2
    assert result.records_invalid == 1
    by_metric = {r.metric_name: r for r in store.records.values()}
    assert by_metric["broken"].valid is False
    assert by_metric["broken"].last_updated == T0 + 121
    assert by_metric["requests"].valid is True
    assert by_metric["requests"].last_updated == T0 + 121

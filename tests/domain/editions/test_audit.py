from __future__ import annotations

from editionsync.domain.editions import CertificateIssuer, record_sync_run
from tests.helpers.editions import (
    FakeSyncRunRepository,
    FakeUnitOfWorkFactory,
    T0,
)


def test_records_batch_in_its_own_unit_of_work() -> None:
    factory = FakeUnitOfWorkFactory()

    outcome = record_sync_run(
        factory,
        total_products=2,
        successful_products=1,
        sync_results=[{"productId": "1"}, {"productId": "2", "error": "boom"}],
        clock=lambda: T0,
    )

    assert outcome.recorded
    assert outcome.error is None
    (record,) = factory.sync_runs.items
    assert record.total_products == 2
    assert record.successful_products == 1
    assert record.sync_results[1]["error"] == "boom"
    assert record.created_at == T0
    assert factory.created[0].committed


def test_failure_is_reported_not_raised() -> None:
    factory = FakeUnitOfWorkFactory(sync_runs=FakeSyncRunRepository(fail=True))

    outcome = record_sync_run(
        factory, total_products=1, successful_products=1, sync_results=[]
    )

    assert not outcome.recorded
    assert outcome.error == "simulated audit failure"
    assert factory.created[0].rollback_called


def test_certificate_urls_point_at_the_customer_app() -> None:
    issuer = CertificateIssuer("https://collectors.example/")

    first = issuer.issue("42", at=T0)
    second = issuer.issue("42", at=T0)

    assert first.url == "https://collectors.example/certificate/42"
    assert first.generated_at == T0
    assert first.token != second.token

"""Unit tests for CPF quota tracking"""

from decimal import Decimal
from miles_ledger.domain.models import QuotaLevel
from miles_ledger.domain.quotas import cpf_quota_usage


def test_distinct_clients_counted_once():
    quota = cpf_quota_usage(["ana", "bruno", "ana", None, ""], limit=25)

    assert quota.used == 2
    assert quota.available == 23
    assert quota.percent == Decimal("8")
    assert quota.level is QuotaLevel.OK
    assert quota.consumes_slot is None


def test_warning_at_eighty_percent():
    quota = cpf_quota_usage([f"c{i}" for i in range(20)], limit=25)

    assert quota.level is QuotaLevel.WARNING


def test_exhausted_at_limit():
    quota = cpf_quota_usage(["a", "b", "c"], limit=3)

    assert quota.level is QuotaLevel.EXHAUSTED
    assert quota.available == 0


def test_known_passenger_does_not_consume_slot():
    quota = cpf_quota_usage(["a", "b", "c"], limit=3, candidate_client_id="b")

    assert quota.consumes_slot is False


def test_new_passenger_consumes_slot():
    quota = cpf_quota_usage(["a"], limit=3, candidate_client_id="z")

    assert quota.consumes_slot is True

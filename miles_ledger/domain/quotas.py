"""Per-CPF passenger quota tracking"""

from decimal import Decimal
from typing import Hashable, Iterable, Optional

from miles_ledger.domain.models import CpfQuota, QuotaLevel


def cpf_quota_usage(
    used_client_ids: Iterable[Hashable],
    limit: int,
    candidate_client_id: Optional[Hashable] = None,
    warning_ratio: float = 0.8,
) -> CpfQuota:
    """
    Summarize how many distinct passengers an account issued tickets for.

    Airlines cap the number of distinct CPFs a loyalty account may issue
    for in a rolling year. The same passenger counted twice uses one slot.
    When a candidate passenger is given, consumes_slot tells whether
    selling to them would take a new slot.
    """
    distinct = {client_id for client_id in used_client_ids if client_id}
    used = len(distinct)

    if used >= limit:
        level = QuotaLevel.EXHAUSTED
    elif used >= limit * warning_ratio:
        level = QuotaLevel.WARNING
    else:
        level = QuotaLevel.OK

    percent = Decimal(used) / Decimal(limit) * 100 if limit > 0 else Decimal("100")

    consumes_slot = None
    if candidate_client_id is not None:
        consumes_slot = candidate_client_id not in distinct

    return CpfQuota(
        used=used,
        limit=limit,
        available=limit - used,
        percent=percent,
        level=level,
        consumes_slot=consumes_slot,
    )

"""GET /v1/positions and /v1/quotas/cpf - inventory read models"""

import uuid
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from miles_ledger.api.dependencies import get_today
from miles_ledger.api.v1.schemas import CpfQuotaResponse, CpfQuotaSchema, PositionSchema, PositionsResponse
from miles_ledger.config import settings
from miles_ledger.domain.models import CpfQuota, MilesPosition
from miles_ledger.domain.money import round_rate
from miles_ledger.domain.quotas import cpf_quota_usage
from miles_ledger.infrastructure.database.repositories import CatalogRepository, TransactionRepository
from miles_ledger.infrastructure.database.session import get_db
from miles_ledger.utils.date_utils import add_months
from miles_ledger.utils.formatting import format_cost_per_thousand, format_quantity

router = APIRouter()


def position_schema(position: MilesPosition) -> PositionSchema:
    return PositionSchema(
        account_id=position.account_id,
        program_id=position.program_id,
        balance_quantity=position.balance_quantity,
        balance_display=format_quantity(position.balance_quantity),
        total_invested_cents=position.total_invested_cents,
        average_cost_per_thousand=round_rate(position.average_cost_per_thousand),
        average_cost_display=format_cost_per_thousand(position.average_cost_per_thousand),
    )


def quota_window_start(today: date) -> date:
    return add_months(today, -settings.cpf_quota_window_months)


def quota_schema(account_id, program_id, quota: CpfQuota) -> CpfQuotaSchema:
    return CpfQuotaSchema(
        account_id=str(account_id),
        program_id=str(program_id),
        used=quota.used,
        limit=quota.limit,
        available=quota.available,
        percent=round_rate(quota.percent),
        level=quota.level,
        consumes_slot=quota.consumes_slot,
    )


def load_cpf_quota(
    db: Session,
    account_id: uuid.UUID,
    program_id: uuid.UUID,
    today: date,
    candidate_client_id: Optional[uuid.UUID] = None,
    cpf_limit: Optional[int] = None,
) -> CpfQuota:
    """Quota usage of one account/program pair over the trailing window"""
    if cpf_limit is None:
        cpf_limit = CatalogRepository(db).get_program(program_id).cpf_limit
    client_ids = TransactionRepository(db).get_sale_client_ids(account_id, program_id, quota_window_start(today))
    return cpf_quota_usage(
        client_ids,
        cpf_limit or settings.default_cpf_limit,
        candidate_client_id=candidate_client_id,
        warning_ratio=settings.cpf_quota_warning_ratio,
    )


@router.get("/positions", response_model=PositionsResponse)
def get_positions(
    account_id: Optional[uuid.UUID] = Query(None, description="Filter by account"),
    program_id: Optional[uuid.UUID] = Query(None, description="Filter by program"),
    db: Session = Depends(get_db),
):
    """Balance and weighted-average CPM per account/program"""
    positions = TransactionRepository(db).get_positions(account_id=account_id, program_id=program_id)
    return PositionsResponse(positions=[position_schema(p) for p in positions])


@router.get("/quotas/cpf", response_model=CpfQuotaResponse)
def get_cpf_quotas(db: Session = Depends(get_db), today: date = Depends(get_today)):
    """
    Distinct passengers per account in each active program (trailing year).

    Sorted by usage, fullest first.
    """
    catalog = CatalogRepository(db)
    quotas = [
        quota_schema(
            account.id,
            program.id,
            load_cpf_quota(db, account.id, program.id, today, cpf_limit=program.cpf_limit),
        )
        for account in catalog.list_accounts()
        for program in catalog.list_programs(active_only=True)
    ]
    quotas.sort(key=lambda q: q.percent, reverse=True)
    return CpfQuotaResponse(window_start=quota_window_start(today), quotas=quotas)

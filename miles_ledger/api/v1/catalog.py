"""Cards, programs, accounts, clients and suppliers referenced by transactions"""

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from miles_ledger.api.dependencies import get_request_id, to_http_error
from miles_ledger.api.v1.schemas import (
    AccountCreate,
    AccountResponse,
    CardCreate,
    CardResponse,
    PartyCreate,
    PartyResponse,
    ProgramCreate,
    ProgramResponse,
)
from miles_ledger.config import settings
from miles_ledger.domain.exceptions import InvalidCalendarDay
from miles_ledger.domain.models import CardCycle
from miles_ledger.infrastructure.database.repositories import CatalogRepository
from miles_ledger.infrastructure.database.session import get_db

router = APIRouter()


def _card(card) -> CardResponse:
    return CardResponse(card_id=str(card.id), name=card.name, closing_day=card.closing_day, due_day=card.due_day)


def _program(program) -> ProgramResponse:
    return ProgramResponse(
        program_id=str(program.id),
        name=program.name,
        slug=program.slug,
        cpf_limit=program.cpf_limit or settings.default_cpf_limit,
    )


def _account(account) -> AccountResponse:
    return AccountResponse(account_id=str(account.id), name=account.name, cpf=account.cpf)


def _party(party) -> PartyResponse:
    return PartyResponse(
        id=str(party.id),
        name=party.name,
        cpf=party.cpf,
        email=party.email,
        phone=party.phone,
        notes=party.notes,
    )


@router.post("/cards", response_model=CardResponse, status_code=201)
def create_card(body: CardCreate, request: Request, db: Session = Depends(get_db)):
    """Register a credit card and its billing cycle"""
    try:
        cycle = CardCycle(closing_day=body.closing_day, due_day=body.due_day)
    except InvalidCalendarDay as e:
        logging.warning(f"Rejected card: {e}", extra={"request_id": get_request_id(request)})
        raise to_http_error(e)

    card = CatalogRepository(db).create_card(body.name, cycle.closing_day, cycle.due_day)
    db.commit()
    return _card(card)


@router.get("/cards", response_model=List[CardResponse])
def list_cards(db: Session = Depends(get_db)):
    return [_card(card) for card in CatalogRepository(db).list_cards()]


@router.post("/programs", response_model=ProgramResponse, status_code=201)
def create_program(body: ProgramCreate, db: Session = Depends(get_db)):
    """Register a loyalty program"""
    try:
        program = CatalogRepository(db).create_program(body.name, body.slug, body.cpf_limit)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Program slug '{body.slug}' already exists")
    return _program(program)


@router.get("/programs", response_model=List[ProgramResponse])
def list_programs(db: Session = Depends(get_db)):
    return [_program(program) for program in CatalogRepository(db).list_programs()]


@router.post("/accounts", response_model=AccountResponse, status_code=201)
def create_account(body: AccountCreate, db: Session = Depends(get_db)):
    """Register a loyalty account holder"""
    account = CatalogRepository(db).create_account(body.name, body.cpf)
    db.commit()
    return _account(account)


@router.get("/accounts", response_model=List[AccountResponse])
def list_accounts(db: Session = Depends(get_db)):
    return [_account(account) for account in CatalogRepository(db).list_accounts()]


@router.post("/clients", response_model=PartyResponse, status_code=201)
def create_client(body: PartyCreate, db: Session = Depends(get_db)):
    """Register a client; sales to a client count against the account's CPF quota"""
    client = CatalogRepository(db).create_client(body.name, body.cpf, body.email, body.phone, body.notes)
    db.commit()
    return _party(client)


@router.get("/clients", response_model=List[PartyResponse])
def list_clients(db: Session = Depends(get_db)):
    return [_party(client) for client in CatalogRepository(db).list_clients()]


@router.post("/suppliers", response_model=PartyResponse, status_code=201)
def create_supplier(body: PartyCreate, db: Session = Depends(get_db)):
    """Register a miles supplier"""
    supplier = CatalogRepository(db).create_supplier(body.name, body.cpf, body.email, body.phone, body.notes)
    db.commit()
    return _party(supplier)


@router.get("/suppliers", response_model=List[PartyResponse])
def list_suppliers(db: Session = Depends(get_db)):
    return [_party(supplier) for supplier in CatalogRepository(db).list_suppliers()]

"""Data access layer for miles ledger entities"""

import uuid
from datetime import date
from typing import Dict, Iterable, List, Optional, Type, Union
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from miles_ledger.infrastructure.database.models import (
    Account,
    Client,
    CreditCard,
    MilesTransaction,
    Payable,
    PayableInstallment,
    Program,
    Receivable,
    ReceivableInstallment,
    Supplier,
)
from miles_ledger.domain.exceptions import EntityNotFoundError
from miles_ledger.domain.miles_cost import summarize_position
from miles_ledger.domain.models import (
    COST_BEARING_TYPES,
    Installment,
    InstallmentStatus,
    MilesPosition,
    TransactionType,
)


class CatalogRepository:
    """Repository for cards, programs, accounts, clients and suppliers"""

    def __init__(self, db: Session):
        self.db = db

    def create_card(self, name: str, closing_day: int, due_day: int) -> CreditCard:
        card = CreditCard(name=name, closing_day=closing_day, due_day=due_day)
        self.db.add(card)
        self.db.flush()
        return card

    def create_program(self, name: str, slug: str, cpf_limit: Optional[int] = None) -> Program:
        program = Program(name=name, slug=slug, cpf_limit=cpf_limit)
        self.db.add(program)
        self.db.flush()
        return program

    def create_account(self, name: str, cpf: Optional[str] = None) -> Account:
        account = Account(name=name, cpf=cpf)
        self.db.add(account)
        self.db.flush()
        return account

    def create_client(
        self,
        name: str,
        cpf: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Client:
        client = Client(name=name, cpf=cpf, email=email, phone=phone, notes=notes)
        self.db.add(client)
        self.db.flush()
        return client

    def create_supplier(
        self,
        name: str,
        cpf: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Supplier:
        supplier = Supplier(name=name, cpf=cpf, email=email, phone=phone, notes=notes)
        self.db.add(supplier)
        self.db.flush()
        return supplier

    def get_card(self, card_id: uuid.UUID) -> CreditCard:
        return self._get(CreditCard, card_id, "Credit card")

    def get_program(self, program_id: uuid.UUID) -> Program:
        return self._get(Program, program_id, "Program")

    def get_account(self, account_id: uuid.UUID) -> Account:
        return self._get(Account, account_id, "Account")

    def get_client(self, client_id: uuid.UUID) -> Client:
        return self._get(Client, client_id, "Client")

    def get_supplier(self, supplier_id: uuid.UUID) -> Supplier:
        return self._get(Supplier, supplier_id, "Supplier")

    def list_cards(self) -> List[CreditCard]:
        return self.db.query(CreditCard).filter(CreditCard.active.is_(True)).order_by(CreditCard.name).all()

    def list_programs(self, active_only: bool = False) -> List[Program]:
        query = self.db.query(Program)
        if active_only:
            query = query.filter(Program.active.is_(True))
        return query.order_by(Program.name).all()

    def list_accounts(self) -> List[Account]:
        return self.db.query(Account).order_by(Account.name).all()

    def list_clients(self) -> List[Client]:
        return self.db.query(Client).filter(Client.active.is_(True)).order_by(Client.name).all()

    def list_suppliers(self) -> List[Supplier]:
        return self.db.query(Supplier).filter(Supplier.active.is_(True)).order_by(Supplier.name).all()

    def _get(self, model: Type, entity_id: uuid.UUID, label: str):
        entity = self.db.get(model, entity_id)
        if entity is None:
            raise EntityNotFoundError(f"{label} {entity_id} not found")
        return entity


class TransactionRepository:
    """Repository for miles transactions and the positions derived from them"""

    def __init__(self, db: Session):
        self.db = db

    def create_transaction(
        self,
        account_id: uuid.UUID,
        program_id: uuid.UUID,
        transaction_type: TransactionType,
        quantity: int,
        transaction_date: date,
        total_cost_cents: Optional[int] = None,
        sale_price_cents: Optional[int] = None,
        expiration_date: Optional[date] = None,
        client_id: Optional[uuid.UUID] = None,
        supplier_id: Optional[uuid.UUID] = None,
        notes: Optional[str] = None,
    ) -> MilesTransaction:
        """Persist a transaction; quantity and cost signs follow the transaction type"""
        sign = -1 if transaction_type.is_outflow else 1
        signed_cost = None
        if transaction_type.carries_cost and total_cost_cents is not None:
            signed_cost = sign * abs(total_cost_cents)

        db_transaction = MilesTransaction(
            account_id=account_id,
            program_id=program_id,
            type=transaction_type.value,
            quantity=sign * abs(quantity),
            total_cost_cents=signed_cost,
            sale_price_cents=sale_price_cents if transaction_type is TransactionType.SALE else None,
            transaction_date=transaction_date,
            expiration_date=expiration_date,
            client_id=client_id,
            supplier_id=supplier_id,
            notes=notes,
        )
        self.db.add(db_transaction)
        self.db.flush()  # Get ID without committing
        return db_transaction

    def get_positions(
        self,
        account_id: Optional[uuid.UUID] = None,
        program_id: Optional[uuid.UUID] = None,
    ) -> List[MilesPosition]:
        """Aggregate balance, acquired quantity and invested cost per account/program"""
        cost_types = [t.value for t in COST_BEARING_TYPES]
        acquired = func.sum(case((MilesTransaction.type.in_(cost_types), MilesTransaction.quantity), else_=0))
        invested = func.sum(func.coalesce(MilesTransaction.total_cost_cents, 0))

        query = self.db.query(
            MilesTransaction.account_id,
            MilesTransaction.program_id,
            func.sum(MilesTransaction.quantity),
            acquired,
            invested,
        ).group_by(MilesTransaction.account_id, MilesTransaction.program_id)

        if account_id is not None:
            query = query.filter(MilesTransaction.account_id == account_id)
        if program_id is not None:
            query = query.filter(MilesTransaction.program_id == program_id)

        return [
            summarize_position(
                account_id=str(row_account),
                program_id=str(row_program),
                balance_quantity=int(balance or 0),
                acquired_quantity=int(acquired_qty or 0),
                total_invested_cents=int(invested_cents or 0),
            )
            for row_account, row_program, balance, acquired_qty, invested_cents in query.all()
        ]

    def get_position(self, account_id: uuid.UUID, program_id: uuid.UUID) -> MilesPosition:
        """Position of one pair; an empty position when nothing was recorded yet"""
        positions = self.get_positions(account_id=account_id, program_id=program_id)
        if positions:
            return positions[0]
        return summarize_position(str(account_id), str(program_id), 0, 0, 0)

    def get_sale_client_ids(self, account_id: uuid.UUID, program_id: uuid.UUID, since: date) -> List[uuid.UUID]:
        """Distinct passengers sold to from an account in a program since a date"""
        rows = (
            self.db.query(MilesTransaction.client_id)
            .filter(
                MilesTransaction.account_id == account_id,
                MilesTransaction.program_id == program_id,
                MilesTransaction.type == TransactionType.SALE.value,
                MilesTransaction.transaction_date >= since,
                MilesTransaction.client_id.isnot(None),
            )
            .distinct()
            .all()
        )
        return [row[0] for row in rows]

    def list_transactions(
        self,
        account_id: Optional[uuid.UUID] = None,
        program_id: Optional[uuid.UUID] = None,
        transaction_type: Optional[TransactionType] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[MilesTransaction]:
        """Transactions newest first, optionally filtered by account, program and type"""
        query = self.db.query(MilesTransaction)
        if account_id is not None:
            query = query.filter(MilesTransaction.account_id == account_id)
        if program_id is not None:
            query = query.filter(MilesTransaction.program_id == program_id)
        if transaction_type is not None:
            query = query.filter(MilesTransaction.type == transaction_type.value)

        return (
            query.order_by(MilesTransaction.transaction_date.desc(), MilesTransaction.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )


ScheduleHeader = Union[Payable, Receivable]
ScheduleRow = Union[PayableInstallment, ReceivableInstallment]


class _ScheduleRepository:
    """Shared persistence of a header plus its installment rows"""

    header_model: Type = None
    installment_model: Type = None
    parent_key: str = None
    settled_status: InstallmentStatus = None
    label: str = None

    def __init__(self, db: Session):
        self.db = db

    def _create(self, header: ScheduleHeader, installments: Iterable[Installment]) -> ScheduleHeader:
        """Write the header and every installment in the same flush"""
        self.db.add(header)
        self.db.flush()

        for inst in installments:
            self.db.add(
                self.installment_model(
                    **{self.parent_key: header.id},
                    sequence_number=inst.sequence_number,
                    amount_cents=inst.amount_cents,
                    due_date=inst.due_date,
                    status=InstallmentStatus.PENDING.value,
                )
            )

        self.db.flush()
        self.db.refresh(header)
        return header

    def get_by_id(self, header_id: uuid.UUID) -> Optional[ScheduleHeader]:
        """Fetch header with installments"""
        return (
            self.db.query(self.header_model)
            .filter(self.header_model.id == header_id)
            .first()
        )

    def list_installments(self) -> List[tuple]:
        """Every installment with its header, earliest due date first"""
        model = self.installment_model
        return (
            self.db.query(model, self.header_model)
            .join(self.header_model, getattr(model, self.parent_key) == self.header_model.id)
            .order_by(model.due_date, self.header_model.created_at, model.sequence_number)
            .all()
        )

    def settle_installment(self, header_id: uuid.UUID, sequence_number: int, settled_on: date) -> ScheduleRow:
        """Mark one installment as paid/received"""
        installment = (
            self.db.query(self.installment_model)
            .filter(
                getattr(self.installment_model, self.parent_key) == header_id,
                self.installment_model.sequence_number == sequence_number,
            )
            .first()
        )
        if installment is None:
            raise EntityNotFoundError(f"{self.label} {header_id} has no installment {sequence_number}")

        installment.status = self.settled_status.value
        installment.settled_date = settled_on
        self.db.flush()
        return installment

    def summarize(self, today: date, month_start: date, month_end: date) -> Dict[str, int]:
        """Totals by effective status, plus what is still open this month"""
        model = self.installment_model
        pending = model.status == InstallmentStatus.PENDING.value

        def total(condition):
            return func.coalesce(func.sum(case((condition, model.amount_cents), else_=0)), 0)

        row = self.db.query(
            total(pending),
            total(pending & (model.due_date < today)),
            total(model.status == self.settled_status.value),
            total(pending & (model.due_date >= month_start) & (model.due_date <= month_end)),
        ).one()

        return {
            "pending_cents": int(row[0]),
            "overdue_cents": int(row[1]),
            "settled_cents": int(row[2]),
            "open_this_month_cents": int(row[3]),
        }


class PayableRepository(_ScheduleRepository):
    """Repository for payables"""

    header_model = Payable
    installment_model = PayableInstallment
    parent_key = "payable_id"
    settled_status = InstallmentStatus.PAID
    label = "Payable"

    def create_payable(
        self,
        description: str,
        total_cents: int,
        installments: List[Installment],
        transaction_id: Optional[uuid.UUID] = None,
        credit_card_id: Optional[uuid.UUID] = None,
    ) -> Payable:
        """Create payable with installments"""
        db_payable = Payable(
            description=description,
            total_cents=total_cents,
            installment_count=len(installments),
            transaction_id=transaction_id,
            credit_card_id=credit_card_id,
        )
        return self._create(db_payable, installments)


class ReceivableRepository(_ScheduleRepository):
    """Repository for receivables"""

    header_model = Receivable
    installment_model = ReceivableInstallment
    parent_key = "receivable_id"
    settled_status = InstallmentStatus.RECEIVED
    label = "Receivable"

    def create_receivable(
        self,
        description: str,
        total_cents: int,
        installments: List[Installment],
        transaction_id: Optional[uuid.UUID] = None,
    ) -> Receivable:
        """Create receivable with installments"""
        db_receivable = Receivable(
            description=description,
            total_cents=total_cents,
            installment_count=len(installments),
            transaction_id=transaction_id,
        )
        return self._create(db_receivable, installments)

"""SQLAlchemy ORM models for the miles ledger"""

import uuid
from sqlalchemy import Column, String, BigInteger, Boolean, DateTime, Date, Integer, ForeignKey, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class CreditCard(Base):
    """Credit card used to finance purchases"""

    __tablename__ = "credit_card"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    closing_day = Column(Integer, nullable=False)
    due_day = Column(Integer, nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Program(Base):
    """Airline or loyalty program"""

    __tablename__ = "program"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    slug = Column(String(64), nullable=False, unique=True)
    cpf_limit = Column(Integer, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Account(Base):
    """Loyalty account owned by one CPF holder"""

    __tablename__ = "account"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    cpf = Column(String(14), nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Client(Base):
    """Buyer of miles; each distinct client issued for takes one CPF slot"""

    __tablename__ = "client"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    cpf = Column(String(14), nullable=True)
    email = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Supplier(Base):
    """Seller miles are bought from"""

    __tablename__ = "supplier"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    cpf = Column(String(14), nullable=True)
    email = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class MilesTransaction(Base):
    """Inventory movement of one program inside one account"""

    __tablename__ = "miles_transaction"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    account_id = Column(UUID(as_uuid=True), ForeignKey("account.id"), nullable=False, index=True)
    program_id = Column(UUID(as_uuid=True), ForeignKey("program.id"), nullable=False, index=True)
    type = Column(Text, nullable=False)
    quantity = Column(BigInteger, nullable=False)  # negative for outflows
    total_cost_cents = Column(BigInteger, nullable=True)
    sale_price_cents = Column(BigInteger, nullable=True)
    transaction_date = Column(Date, nullable=False)
    expiration_date = Column(Date, nullable=True)
    client_id = Column(UUID(as_uuid=True), ForeignKey("client.id"), nullable=True, index=True)
    supplier_id = Column(UUID(as_uuid=True), ForeignKey("supplier.id"), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Payable(Base):
    """Amount owed, split into monthly installments"""

    __tablename__ = "payable"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    transaction_id = Column(UUID(as_uuid=True), ForeignKey("miles_transaction.id", ondelete="SET NULL"), nullable=True)
    credit_card_id = Column(UUID(as_uuid=True), ForeignKey("credit_card.id"), nullable=True)
    description = Column(Text, nullable=False)
    total_cents = Column(BigInteger, nullable=False)
    installment_count = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    installments = relationship(
        "PayableInstallment",
        back_populates="payable",
        cascade="all, delete-orphan",
        order_by="PayableInstallment.sequence_number",
    )


class PayableInstallment(Base):
    """Individual installment of a payable"""

    __tablename__ = "payable_installment"
    __table_args__ = (UniqueConstraint("payable_id", "sequence_number"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    payable_id = Column(UUID(as_uuid=True), ForeignKey("payable.id", ondelete="CASCADE"), nullable=False)
    sequence_number = Column(Integer, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    status = Column(Text, nullable=False, default="pending")
    settled_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    payable = relationship("Payable", back_populates="installments")


class Receivable(Base):
    """Amount owed by a client, split into monthly installments"""

    __tablename__ = "receivable"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    transaction_id = Column(UUID(as_uuid=True), ForeignKey("miles_transaction.id", ondelete="SET NULL"), nullable=True)
    description = Column(Text, nullable=False)
    total_cents = Column(BigInteger, nullable=False)
    installment_count = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    installments = relationship(
        "ReceivableInstallment",
        back_populates="receivable",
        cascade="all, delete-orphan",
        order_by="ReceivableInstallment.sequence_number",
    )


class ReceivableInstallment(Base):
    """Individual installment of a receivable"""

    __tablename__ = "receivable_installment"
    __table_args__ = (UniqueConstraint("receivable_id", "sequence_number"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    receivable_id = Column(UUID(as_uuid=True), ForeignKey("receivable.id", ondelete="CASCADE"), nullable=False)
    sequence_number = Column(Integer, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    status = Column(Text, nullable=False, default="pending")
    settled_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    receivable = relationship("Receivable", back_populates="installments")

"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import date
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from miles_ledger.api.dependencies import get_today
from miles_ledger.api.main import create_app
from miles_ledger.infrastructure.database.models import Account, Base, CreditCard, Program
from miles_ledger.infrastructure.database.repositories import CatalogRepository
from miles_ledger.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Fixed reference date so overdue and quota windows are deterministic
TODAY = date(2024, 6, 15)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    return TestClient(app)


@pytest.fixture
def account(db: Session) -> Account:
    account = CatalogRepository(db).create_account("Maria Souza", cpf="123.456.789-00")
    db.commit()
    return account


@pytest.fixture
def program(db: Session) -> Program:
    program = CatalogRepository(db).create_program("Smiles", "smiles", cpf_limit=3)
    db.commit()
    return program


@pytest.fixture
def other_program(db: Session) -> Program:
    program = CatalogRepository(db).create_program("Latam Pass", "latam")
    db.commit()
    return program


@pytest.fixture
def card(db: Session) -> CreditCard:
    """Card closing on the 20th, due on the 27th"""
    card = CatalogRepository(db).create_card("Visa Infinite", closing_day=20, due_day=27)
    db.commit()
    return card

"""Pytest fixtures for testing"""

import base64
import pytest
from typing import Callable, Generator, Optional
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker, Session
from debt_ledger.api.dependencies import get_photo_store
from debt_ledger.api.main import create_app
from debt_ledger.domain.models import NewClient
from debt_ledger.infrastructure.database.models import Base, Debt
from debt_ledger.infrastructure.database.session import build_engine, get_db
from debt_ledger.infrastructure.storage.photos import PhotoStore
from debt_ledger.services.archive import DebtArchive
from debt_ledger.services.debts import DebtLedger
from debt_ledger.services.payments import PaymentProcessor


# Test database (file-backed so several sessions can share it)
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = build_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PHOTO_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"
PHOTO_DATA_URL = "data:image/jpeg;base64," + base64.b64encode(PHOTO_BYTES).decode()


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
def session_factory(db: Session) -> sessionmaker:
    """Independent sessions on the test database, e.g. one per thread"""
    return TestingSessionLocal


@pytest.fixture
def photo_store(tmp_path) -> PhotoStore:
    return PhotoStore(root=str(tmp_path / "uploads"), url_prefix="/uploads")


@pytest.fixture
def client(db: Session, photo_store: PhotoStore) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app(upload_dir=str(photo_store.root))

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_photo_store] = lambda: photo_store
    return TestClient(app)


@pytest.fixture
def ledger(db: Session, photo_store: PhotoStore) -> DebtLedger:
    return DebtLedger(db, photo_store)


@pytest.fixture
def processor(db: Session) -> PaymentProcessor:
    return PaymentProcessor(db)


@pytest.fixture
def archive(db: Session) -> DebtArchive:
    return DebtArchive(db)


@pytest.fixture
def new_debt(ledger: DebtLedger) -> Callable[..., Debt]:
    """Factory: record a debt for a new client, or for an existing one via client_id"""

    def _make(
        amount_cents: int = 50_000,
        fullname: str = "Aliya Sadykova",
        phone: str = "+996555000111",
        client_id: Optional[int] = None,
        comment: str = "flour and sugar",
    ) -> Debt:
        if client_id is not None:
            return ledger.create_debt(client_id, amount_cents, comment)
        return ledger.create_debt(
            NewClient(fullname=fullname, phone=phone, address="Osh, Lenina 12"),
            amount_cents,
            comment,
            photo=PHOTO_DATA_URL,
        )

    return _make

"""Unit tests for recording and listing debts"""

import pytest
from datetime import timedelta
from pathlib import Path
from sqlalchemy.orm import Session
from debt_ledger.domain.exceptions import NotFoundError, ValidationError
from debt_ledger.domain.models import DebtStatus, NewClient, Rating, Reputation
from debt_ledger.infrastructure.database.models import Client
from debt_ledger.services.debts import DebtLedger
from debt_ledger.utils.date_utils import utc_now
from conftest import PHOTO_DATA_URL


def test_create_debt_for_new_client(ledger: DebtLedger, photo_store):
    """Test a new client is created with a stored photo and reputation new"""
    debt = ledger.create_debt(
        NewClient(fullname="Aliya Sadykova", phone="+996555000111", address="Osh"),
        50_000,
        "groceries",
        photo=PHOTO_DATA_URL,
    )

    assert debt.status == DebtStatus.ACTIVE.value
    assert debt.original_cents == 50_000
    assert debt.remaining_cents == 50_000
    assert debt.payments == []
    assert debt.client.fullname == "Aliya Sadykova"
    assert debt.client.reputation == Reputation.NEW.value
    assert debt.client.photo.startswith("/uploads/")
    assert (Path(photo_store.root) / debt.client.photo[len("/uploads/"):]).exists()


def test_new_client_requires_photo(ledger: DebtLedger, db: Session):
    """Test unverified new customers must be photographed"""
    with pytest.raises(ValidationError):
        ledger.create_debt(NewClient(fullname="No Photo", phone="+996"), 10_000, "")

    assert db.query(Client).count() == 0


def test_new_client_requires_name_and_phone(ledger: DebtLedger):
    with pytest.raises(ValidationError):
        ledger.create_debt(NewClient(fullname=" ", phone="+996"), 10_000, "", photo=PHOTO_DATA_URL)
    with pytest.raises(ValidationError):
        ledger.create_debt(NewClient(fullname="Aliya", phone=""), 10_000, "", photo=PHOTO_DATA_URL)


@pytest.mark.parametrize("amount_cents", [0, -1])
def test_amount_must_be_positive(ledger: DebtLedger, amount_cents):
    with pytest.raises(ValidationError):
        ledger.create_debt(NewClient("Aliya", "+996"), amount_cents, "", photo=PHOTO_DATA_URL)


def test_existing_client_photo_optional(ledger: DebtLedger, new_debt):
    """Test a second debt for a known client needs no photo and keeps the old one"""
    first = new_debt()
    photo = first.client.photo

    second = ledger.create_debt(first.client_id, 5_000, "bread")

    assert second.client_id == first.client_id
    assert second.client.photo == photo


def test_existing_client_photo_replaced_when_supplied(ledger: DebtLedger, new_debt):
    first = new_debt()
    old_photo = first.client.photo

    second = ledger.create_debt(first.client_id, 5_000, "bread", photo="/uploads/2026-10/new.jpg")

    assert second.client.photo == "/uploads/2026-10/new.jpg"
    assert second.client.photo != old_photo


def test_unknown_client_id(ledger: DebtLedger, db: Session):
    with pytest.raises(NotFoundError):
        ledger.create_debt(404, 5_000, "")


def test_list_defaults_to_newest_first(ledger: DebtLedger, new_debt):
    first = new_debt(fullname="Aliya")
    second = new_debt(fullname="Bakyt", phone="+2")
    third = new_debt(fullname="Cholpon", phone="+3")

    items, total = ledger.list_debts()

    assert total == 3
    assert [d.id for d in items] == [third.id, second.id, first.id]


def test_list_paginates_without_overlap(ledger: DebtLedger, new_debt):
    """Test pages partition the result set"""
    ids = {new_debt(fullname=f"Client {i}", phone=f"+{i}").id for i in range(5)}

    page1, total = ledger.list_debts(page=1, limit=2)
    page2, _ = ledger.list_debts(page=2, limit=2)
    page3, _ = ledger.list_debts(page=3, limit=2)

    seen = [d.id for d in page1 + page2 + page3]
    assert total == 5
    assert len(page3) == 1
    assert len(seen) == len(set(seen))
    assert set(seen) == ids


def test_list_filters_by_status_partition(ledger: DebtLedger, processor, archive, new_debt):
    """Test active, paid and deleted listings are disjoint"""
    active = new_debt(fullname="Active", phone="+1")
    paid = new_debt(fullname="Paid", phone="+2", amount_cents=1_000)
    deleted = new_debt(fullname="Deleted", phone="+3")
    processor.record_payment(paid.id, 1_000, "done", Rating.GOOD)
    archive.delete_debt(deleted.id, "duplicate entry")

    active_items, _ = ledger.list_debts(status="active")
    paid_items, _ = ledger.list_debts(status=DebtStatus.PAID)
    deleted_items, _ = ledger.list_debts(status="deleted")

    assert [d.id for d in active_items] == [active.id]
    assert [d.id for d in paid_items] == [paid.id]
    assert [d.id for d in deleted_items] == [deleted.id]


def test_list_search_is_case_insensitive_substring(ledger: DebtLedger, new_debt):
    match = new_debt(fullname="Alisher Usmonov", phone="+1")
    new_debt(fullname="Bakyt", phone="+2")

    items, total = ledger.list_debts(search="aLiSh")

    assert total == 1
    assert items[0].id == match.id
    assert items[0].client.fullname == "Alisher Usmonov"


def test_list_search_escapes_wildcards(ledger: DebtLedger, new_debt):
    new_debt(fullname="Bakyt", phone="+2")

    items, total = ledger.list_debts(search="%")

    assert total == 0
    assert items == []


def test_list_filters_by_creation_day(ledger: DebtLedger, new_debt):
    debt = new_debt()
    today = utc_now().date()

    items, _ = ledger.list_debts(day=today)
    _, total = ledger.list_debts(day=today - timedelta(days=1))

    assert [d.id for d in items] == [debt.id]
    assert total == 0


def test_deleted_listing_filters_by_deletion_day(ledger: DebtLedger, archive, new_debt, db: Session):
    debt = new_debt()
    debt.created_at = utc_now() - timedelta(days=3)
    db.commit()
    archive.delete_debt(debt.id, "entered twice")

    items, _ = ledger.list_debts(status="deleted", day=utc_now().date())

    assert [d.id for d in items] == [debt.id]


def test_list_sort_keys(ledger: DebtLedger, new_debt):
    small = new_debt(fullname="Zarina", phone="+1", amount_cents=1_000)
    large = new_debt(fullname="Azamat", phone="+2", amount_cents=90_000)
    medium = new_debt(fullname="Meerim", phone="+3", amount_cents=30_000)

    by_amount_desc, _ = ledger.list_debts(sort_by="amount_desc")
    by_amount_asc, _ = ledger.list_debts(sort_by="amount_asc")
    by_name, _ = ledger.list_debts(sort_by="name")
    by_date_old, _ = ledger.list_debts(sort_by="date_old")

    assert [d.id for d in by_amount_desc] == [large.id, medium.id, small.id]
    assert [d.id for d in by_amount_asc] == [small.id, medium.id, large.id]
    assert [d.id for d in by_name] == [large.id, medium.id, small.id]
    assert [d.id for d in by_date_old] == [small.id, large.id, medium.id]


def test_list_rejects_unknown_sort_and_status(ledger: DebtLedger, db: Session):
    with pytest.raises(ValidationError):
        ledger.list_debts(sort_by="cheapest")
    with pytest.raises(ValidationError):
        ledger.list_debts(status="archived")


def test_debts_for_client(ledger: DebtLedger, processor, new_debt):
    first = new_debt(amount_cents=1_000)
    second = new_debt(client_id=first.client_id)
    new_debt(fullname="Someone Else", phone="+9")
    processor.record_payment(first.id, 1_000, "done", Rating.GOOD)

    all_debts = ledger.get_debts_for_client(first.client_id)
    active = ledger.get_debts_for_client(first.client_id, "active")

    assert [d.id for d in all_debts] == [second.id, first.id]
    assert [d.id for d in active] == [second.id]


def test_debts_for_unknown_client(ledger: DebtLedger, db: Session):
    with pytest.raises(NotFoundError):
        ledger.get_debts_for_client(404)


def test_list_payments_oldest_first(ledger: DebtLedger, processor, new_debt):
    debt = new_debt(amount_cents=50_000)
    processor.record_payment(debt.id, 10_000, "first")
    processor.record_payment(debt.id, 20_000, "second")

    payments = ledger.list_payments(debt.id)

    assert [p.comment for p in payments] == ["first", "second"]
    assert [p.remaining_cents for p in payments] == [40_000, 20_000]


def test_list_payments_unknown_debt(ledger: DebtLedger, db: Session):
    with pytest.raises(NotFoundError):
        ledger.list_payments(404)

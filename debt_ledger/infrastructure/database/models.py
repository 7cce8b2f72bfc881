"""SQLAlchemy ORM models for clients, debts and the payment history"""

from sqlalchemy import Column, BigInteger, DateTime, ForeignKey, Integer, Text, func, select
from sqlalchemy.orm import column_property, declarative_base, relationship

from debt_ledger.domain.models import DebtStatus, Reputation
from debt_ledger.utils.date_utils import utc_now

Base = declarative_base()


class Client(Base):
    """Customer who owes money; never deleted"""

    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    fullname = Column(Text, nullable=False, index=True)
    phone = Column(Text, nullable=False)
    address = Column(Text, nullable=False, default="")
    photo = Column(Text, nullable=True)  # stored reference, e.g. /uploads/2026-10/name.jpg
    reputation = Column(Text, nullable=False, default=Reputation.NEW.value)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, server_default=func.now())

    debts = relationship("Debt", back_populates="client")


class Debt(Base):
    """
    Amount owed by a client.

    original_cents never changes; the balance is derived from the payment
    history. `version` is bumped on every write so concurrent payments that
    read a stale row fail at flush time.
    """

    __tablename__ = "debts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    original_cents = Column(BigInteger, nullable=False)
    comment = Column(Text, nullable=False, default="")
    status = Column(Text, nullable=False, default=DebtStatus.ACTIVE.value, index=True)
    rating = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, server_default=func.now())
    paid_at = Column(DateTime(timezone=True), nullable=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    delete_comment = Column(Text, nullable=True)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    client = relationship("Client", back_populates="debts")
    payments = relationship("DebtPayment", back_populates="debt", order_by="DebtPayment.id")

    @property
    def remaining_cents(self) -> int:
        return self.original_cents - self.paid_cents


class DebtPayment(Base):
    """Append-only payment record with the balance left after it"""

    __tablename__ = "debt_payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    debt_id = Column(Integer, ForeignKey("debts.id"), nullable=False, index=True)
    paid_cents = Column(BigInteger, nullable=False)
    remaining_cents = Column(BigInteger, nullable=False)
    comment = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, server_default=func.now())

    debt = relationship("Debt", back_populates="payments")


# Sum of payments so far, loaded with every Debt row
Debt.paid_cents = column_property(
    select(func.coalesce(func.sum(DebtPayment.paid_cents), 0))
    .where(DebtPayment.debt_id == Debt.id)
    .correlate_except(DebtPayment)
    .scalar_subquery()
)

"""SQLAlchemy models for fxdesk database."""

import uuid
from datetime import datetime, UTC
from sqlalchemy import (
    Boolean,
    Column,
    String,
    ForeignKey,
    DateTime,
    Numeric,
    JSON,
    Index,
    Integer,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

from fxdesk.domain.entities import LOCAL_CURRENCY_LABEL

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class Customer(Base):
    """Customer model."""

    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    phones = Column(JSON, nullable=False, default=list)
    email = Column(String, nullable=True)
    status = Column(String, nullable=False, default="active")
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    updated_at = Column(DateTime, nullable=True)

    # Relationships
    backups = relationship("CustomerBackup", back_populates="customer")


class CustomerBackup(Base):
    """Customer backup (audit trail) model."""

    __tablename__ = "customer_backups"

    id = Column(String(36), primary_key=True, default=_new_id)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False)
    old_data = Column(JSON, nullable=False)
    new_data = Column(JSON, nullable=False)
    changed_by = Column(String, nullable=False)
    reason = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (Index("ix_customer_backups_customer_created", "customer_id", "created_at"),)

    # Relationships
    customer = relationship("Customer", back_populates="backups")


class Transaction(Base):
    """Treasury transaction model."""

    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=_new_id)
    type = Column(String, nullable=False)
    category = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    amount = Column(Numeric(18, 2), nullable=True)
    fee = Column(Numeric(18, 2), nullable=True)
    fee_currency = Column(String, nullable=True)
    currency = Column(String, nullable=True)
    price = Column(Numeric(18, 2), nullable=True)
    rate = Column(Numeric(18, 6), nullable=True)
    currency_final = Column(String, nullable=False, default=LOCAL_CURRENCY_LABEL)
    customer_name = Column(String, nullable=False, default="")
    country_city = Column(String, nullable=False, default="")
    deliver_to = Column(String, nullable=True)
    from_account_name = Column(String, nullable=True)
    to_account_name = Column(String, nullable=True)
    fx_base_currency = Column(String, nullable=True)
    fx_quote_currency = Column(String, nullable=True)
    notes = Column(String, nullable=True)


class Currency(Base):
    """Currency catalogue model."""

    __tablename__ = "currencies"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False, unique=True)
    code = Column(String, nullable=False, unique=True)
    symbol = Column(String, nullable=True)
    # Catalogue order, used as the report's currency order
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Account(Base):
    """Treasury account model."""

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False, unique=True)
    category = Column(String, nullable=False)
    supported_currencies = Column(JSON, nullable=False, default=list)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


TABLE_MODELS = {
    Customer.__tablename__: Customer,
    CustomerBackup.__tablename__: CustomerBackup,
    Transaction.__tablename__: Transaction,
    Currency.__tablename__: Currency,
    Account.__tablename__: Account,
}


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, expire_on_commit=False)

# models.py - SQLAlchemy models for applications, payments and referral partners
from sqlalchemy import Column, Integer, String, Text, Float, ForeignKey, TIMESTAMP
from sqlalchemy.orm import declarative_base
import datetime
import uuid

Base = declarative_base()

APPLICATION_STATUSES = ("submitted", "approved", "rejected")
PAYMENT_STATUSES = ("pending", "completed", "failed")
REFERRAL_TYPES = ("institution", "individual")


def new_id():
    return str(uuid.uuid4())


class Application(Base):
    __tablename__ = "applications"
    id = Column(String(36), primary_key=True, default=new_id)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    age = Column(Integer, nullable=False)
    occupation = Column(Text, nullable=False)
    location = Column(Text, nullable=False)
    motivation = Column(Text, nullable=False)
    experience = Column(Text, nullable=False)
    goals = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="submitted")
    created_at = Column(TIMESTAMP(timezone=True), default=datetime.datetime.utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), default=datetime.datetime.utcnow)


class Payment(Base):
    __tablename__ = "payments"
    id = Column(String(36), primary_key=True, default=new_id)
    application_id = Column(String(36), ForeignKey("applications.id"), nullable=False)
    amount = Column(Float, nullable=False)
    currency = Column(String(10), nullable=False)
    payment_method = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    transaction_id = Column(String(100))
    created_at = Column(TIMESTAMP(timezone=True), default=datetime.datetime.utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), default=datetime.datetime.utcnow)


class Referral(Base):
    __tablename__ = "referrals"
    id = Column(String(36), primary_key=True, default=new_id)
    referral_type = Column(String(20), nullable=False)
    # institution name for institutions, full name for individuals
    name = Column(Text, nullable=False)
    contact_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    address = Column(Text, nullable=False)
    nin_number = Column(String(11), nullable=False)
    state_of_resident = Column(Text, nullable=False)
    state_of_origin = Column(Text, nullable=False)
    bank_name = Column(Text, nullable=False)
    account_number = Column(String(20), nullable=False)
    account_name = Column(Text, nullable=False)
    commission_rate = Column(Float, nullable=False, default=0.25)
    created_at = Column(TIMESTAMP(timezone=True), default=datetime.datetime.utcnow)

import uuid

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_public_id():
    """Generate a unique public ID for secure public access"""
    return str(uuid.uuid4())


class Tenant(Base):
    """A clinic. Every appointment and check-in belongs to exactly one tenant."""

    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(
        String(36), unique=True, nullable=False, index=True, default=generate_public_id
    )
    name = Column(String(255), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)  # Public booking URL
    owner_auth_id = Column(String(255), nullable=True)  # Hosted auth uid of the owner
    status = Column(String(20), default="active", nullable=False)  # active, suspended, cancelled
    plan = Column(String(20), default="trial", nullable=False)  # trial, basic, professional, enterprise
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    profiles = relationship("Profile", back_populates="tenant")
    appointments = relationship(
        "Appointment", back_populates="tenant", cascade="all, delete-orphan"
    )
    checkins = relationship("CheckIn", back_populates="tenant", cascade="all, delete-orphan")
    medications = relationship("Medication", back_populates="tenant", cascade="all, delete-orphan")
    transactions = relationship("Transaction", back_populates="tenant", cascade="all, delete-orphan")


class Profile(Base):
    """Clinic staff member, linked to a hosted auth user"""

    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    auth_user_id = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), index=True, nullable=True)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), default="doctor", nullable=False)  # doctor, admin, receptionist, patient
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    tenant = relationship("Tenant", back_populates="profiles")


class Appointment(Base):
    """A single agenda slot. Recurring series are stored as one row per occurrence."""

    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(
        String(36), unique=True, nullable=False, index=True, default=generate_public_id
    )
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)

    patient_name = Column(String(255), nullable=False)
    patient_phone = Column(String(20), nullable=True)
    patient_email = Column(String(255), nullable=True)

    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)

    # Status workflow: scheduled → confirmed → in_progress → completed
    # cancelled / no_show close the slot, blocked reserves it without a patient
    status = Column(String(20), default="scheduled", nullable=False, index=True)
    type = Column(String(20), default="presencial", nullable=False)  # presencial, telemed
    meet_link = Column(Text, nullable=True)  # Telemedicine room URL
    notes = Column(Text, nullable=True)

    # Shared by every occurrence generated from one recurrence rule
    series_id = Column(String(36), nullable=True, index=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    tenant = relationship("Tenant", back_populates="appointments")


class CheckIn(Base):
    """Walk-in patient waiting in the reception queue"""

    __tablename__ = "checkins"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)

    patient_name = Column(String(255), nullable=False)
    patient_cpf = Column(String(14), nullable=True)
    patient_phone = Column(String(20), nullable=True)
    symptoms = Column(Text, nullable=True)
    pain_level = Column(Integer, default=0, nullable=False)  # 0-10

    status = Column(String(20), default="waiting", nullable=False, index=True)  # waiting, in_progress, completed, cancelled
    priority = Column(String(10), default="normal", nullable=False)  # low, normal, high, urgent

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    tenant = relationship("Tenant", back_populates="checkins")


class Medication(Base):
    """Pharmacy inventory item"""

    __tablename__ = "medications"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)

    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    dosage = Column(String(100), nullable=True)  # e.g. "500mg"
    price = Column(Float, default=0, nullable=False)
    stock = Column(Integer, default=0, nullable=False)  # Units on hand
    category = Column(String(100), default="Geral", nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    tenant = relationship("Tenant", back_populates="medications")


class Transaction(Base):
    """Finance ledger entry"""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)

    description = Column(String(255), nullable=False)
    amount = Column(Float, nullable=False)  # Always positive; direction comes from type
    type = Column(String(10), nullable=False, index=True)  # income, expense
    status = Column(String(20), default="pending", nullable=False, index=True)  # paid, pending, cancelled
    category = Column(String(100), nullable=True)  # Consulta, TISS, Convênio, Aluguel...
    date = Column(Date, nullable=False, index=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    tenant = relationship("Tenant", back_populates="transactions")

# medappoint/models/tables.py

from datetime import datetime, timezone

from sqlalchemy import (
    DDL,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    event,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.types import TypeDecorator

Base = declarative_base()
metadata = Base.metadata

# Names the write path looks for when the store rejects an overlap
OVERLAP_CONSTRAINT = "ex_appointments_provider_overlap"
OVERLAP_TRIGGER_MARKER = "appointment_overlap"


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime stored as naive UTC.

    SQLite has no timezone type; storing UTC keeps values comparable
    as text, and loaded values always come back aware (UTC).
    """
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("naive datetime cannot be stored as an instant")
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Clinics(Base):
    __tablename__ = 'clinics'

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    timezone = Column(Text, nullable=False)  # IANA name, e.g. "Asia/Kuala_Lumpur"
    address = Column(Text)
    created_at = Column(UTCDateTime, nullable=False, default=_utcnow)

    providers = relationship('Providers', back_populates='clinic')
    appointments = relationship('Appointments', back_populates='clinic')


class Providers(Base):
    __tablename__ = 'providers'

    id = Column(Integer, primary_key=True)
    clinic_id = Column(ForeignKey('clinics.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(Integer, unique=True)
    full_name = Column(Text, nullable=False)
    specialty = Column(Text)

    clinic = relationship('Clinics', back_populates='providers')
    availabilities = relationship('Availabilities', back_populates='provider')
    appointments = relationship('Appointments', back_populates='provider')


class Patients(Base):
    __tablename__ = 'patients'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, unique=True)
    full_name = Column(Text, nullable=False)
    phone = Column(Text)

    appointments = relationship('Appointments', back_populates='patient')


class Services(Base):
    __tablename__ = 'services'
    __table_args__ = (
        CheckConstraint('duration_minutes > 0', name='ck_services_duration_positive'),
    )

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    description = Column(Text)
    duration_minutes = Column(Integer, nullable=False)

    appointments = relationship('Appointments', back_populates='service')


class Availabilities(Base):
    __tablename__ = 'availabilities'
    __table_args__ = (
        CheckConstraint('weekday BETWEEN 1 AND 7', name='ck_availabilities_weekday'),
        Index('ix_availabilities_provider_weekday', 'provider_id', 'weekday'),
    )

    id = Column(Integer, primary_key=True)
    provider_id = Column(ForeignKey('providers.id', ondelete='CASCADE'), nullable=False)
    weekday = Column(Integer, nullable=False)  # 1 = Monday ... 7 = Sunday
    start_hhmm = Column(Text, nullable=False)
    end_hhmm = Column(Text, nullable=False)

    provider = relationship('Providers', back_populates='availabilities')


class Appointments(Base):
    __tablename__ = 'appointments'
    __table_args__ = (
        CheckConstraint('end_time > start_time', name='ck_appointments_range'),
        CheckConstraint(
            "status IN ('scheduled', 'completed', 'cancelled')",
            name='ck_appointments_status',
        ),
        Index('ix_appointments_provider_start', 'provider_id', 'start_time'),
        Index('ix_appointments_patient_start', 'patient_id', 'start_time'),
    )

    id = Column(Integer, primary_key=True)
    clinic_id = Column(ForeignKey('clinics.id', ondelete='CASCADE'), nullable=False)
    provider_id = Column(ForeignKey('providers.id', ondelete='CASCADE'), nullable=False)
    patient_id = Column(ForeignKey('patients.id', ondelete='CASCADE'), nullable=False)
    service_id = Column(ForeignKey('services.id'), nullable=False)
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)
    status = Column(Text, nullable=False, default='scheduled')
    notes = Column(Text)
    created_at = Column(UTCDateTime, nullable=False, default=_utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=_utcnow)

    clinic = relationship('Clinics', back_populates='appointments')
    provider = relationship('Providers', back_populates='appointments')
    patient = relationship('Patients', back_populates='appointments')
    service = relationship('Services', back_populates='appointments')


# ── Store-level exclusivity ──────────────────────────────────────────────
# One scheduled appointment per provider per instant, enforced by the
# database so that two racing inserts cannot both succeed.

event.listen(
    Appointments.__table__,
    'after_create',
    DDL('CREATE EXTENSION IF NOT EXISTS btree_gist').execute_if(dialect='postgresql'),
)
event.listen(
    Appointments.__table__,
    'after_create',
    DDL(
        f"ALTER TABLE appointments ADD CONSTRAINT {OVERLAP_CONSTRAINT} "
        "EXCLUDE USING gist ("
        "provider_id WITH =, "
        "tsrange(start_time, end_time, '[)') WITH &&"
        ") WHERE (status = 'scheduled')"
    ).execute_if(dialect='postgresql'),
)
event.listen(
    Appointments.__table__,
    'after_create',
    DDL(
        "CREATE TRIGGER trg_appointments_no_overlap "
        "BEFORE INSERT ON appointments "
        "WHEN NEW.status = 'scheduled' "
        "BEGIN "
        f"SELECT RAISE(ABORT, '{OVERLAP_TRIGGER_MARKER}') "
        "WHERE EXISTS ("
        "SELECT 1 FROM appointments "
        "WHERE provider_id = NEW.provider_id "
        "AND status = 'scheduled' "
        "AND start_time < NEW.end_time "
        "AND end_time > NEW.start_time"
        "); "
        "END"
    ).execute_if(dialect='sqlite'),
)

from .tables import (
    Base,
    Clinics,
    Providers,
    Patients,
    Services,
    Availabilities,
    Appointments,
    OVERLAP_CONSTRAINT,
    OVERLAP_TRIGGER_MARKER,
)

__all__ = [
    "Base",
    "Clinics",
    "Providers",
    "Patients",
    "Services",
    "Availabilities",
    "Appointments",
    "OVERLAP_CONSTRAINT",
    "OVERLAP_TRIGGER_MARKER",
]

"""Lookup maps over reference data, built once per load."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from clinic_calendar.models.reference import Calendar, HealthProfessional, Motive, Patient, Site


@dataclass
class EntityIndex:
    """Reference entities keyed for constant-time joins."""

    calendar_by_id: dict[str, Calendar] = field(default_factory=dict)
    patient_by_id: dict[str, Patient] = field(default_factory=dict)
    patient_by_external_id: dict[str, Patient] = field(default_factory=dict)
    site_by_id: dict[str, Site] = field(default_factory=dict)
    hp_by_id: dict[str, HealthProfessional] = field(default_factory=dict)
    motive_by_id: dict[str, Motive] = field(default_factory=dict)

    def find_patient(self, reference: str | None) -> Patient | None:
        """Resolve an event's patient reference by external id first, then by id."""
        if not reference:
            return None
        return self.patient_by_external_id.get(reference) or self.patient_by_id.get(reference)

    def hp_for_calendar(self, calendar_id: str) -> HealthProfessional | None:
        calendar = self.calendar_by_id.get(calendar_id)
        return self.hp_by_id.get(calendar.hp_id) if calendar else None


def build_index(
    calendars: Iterable[Calendar],
    patients: Iterable[Patient],
    sites: Iterable[Site] = (),
    hps: Iterable[HealthProfessional] = (),
    motives: Iterable[Motive] = (),
) -> EntityIndex:
    """Build lookup maps from flat reference lists.

    Patients without an external id are only reachable by their own id.
    """
    patients = list(patients)
    return EntityIndex(
        calendar_by_id={calendar.id: calendar for calendar in calendars},
        patient_by_id={patient.id: patient for patient in patients},
        patient_by_external_id={patient.external_id: patient for patient in patients if patient.external_id},
        site_by_id={site.id: site for site in sites},
        hp_by_id={hp.id: hp for hp in hps},
        motive_by_id={motive.id: motive for motive in motives},
    )

"""Doctor directory: lookup by name or specialty, and specialty listing."""

import logging
from typing import List, Optional

from ..errors import AmbiguousError, NotFoundError, ValidationError
from ..models import Doctor
from .ledger import DoctorStore
from .matching import MatchStrategy

logger = logging.getLogger(__name__)


class DoctorDirectory:
    """Read-mostly catalog of doctors behind a configured matching strategy."""

    def __init__(self, store: DoctorStore, strategy: MatchStrategy = MatchStrategy.SUBSTRING):
        """
        Initialize the directory.

        Args:
            store: Source of doctor records
            strategy: Matching strategy shared by every name/specialty lookup
        """
        self.store = store
        self.strategy = strategy

    async def find_by_name(self, query: str) -> List[Doctor]:
        """Doctors whose name matches the query (zero, one or many)."""
        doctors = await self.store.list_doctors()
        return self.strategy.filter(doctors, query, key=lambda d: d.name)

    async def find_by_specialty(self, query: str) -> List[Doctor]:
        """Doctors whose specialty matches the query."""
        doctors = await self.store.list_doctors()
        return self.strategy.filter(doctors, query, key=lambda d: d.specialty)

    async def find_doctors(
        self,
        specialty: Optional[str] = None,
        doctor_name: Optional[str] = None,
    ) -> List[Doctor]:
        """Doctors matching every filter given; all doctors when none is."""
        doctors = await self.store.list_doctors()
        if specialty:
            doctors = self.strategy.filter(doctors, specialty, key=lambda d: d.specialty)
        if doctor_name:
            doctors = self.strategy.filter(doctors, doctor_name, key=lambda d: d.name)
        return doctors

    async def list_specialties(self) -> List[str]:
        """Deduplicated specialties, in directory order."""
        seen = {}
        for doctor in await self.store.list_doctors():
            key = doctor.specialty.strip().casefold()
            if key and key not in seen:
                seen[key] = doctor.specialty.strip()
        return list(seen.values())

    async def resolve(self, doctor_name: str) -> Doctor:
        """
        Resolve a doctor reference to exactly one doctor.

        Raises:
            ValidationError: If the reference is blank
            NotFoundError: If nothing matches
            AmbiguousError: If more than one doctor matches
        """
        if not doctor_name or not doctor_name.strip():
            raise ValidationError("A doctor name is required.")

        matches = await self.find_by_name(doctor_name)
        if not matches:
            raise NotFoundError(f"Could not find a doctor named {doctor_name}.")
        if len(matches) > 1:
            names = [d.name for d in matches]
            logger.info(f"Doctor reference '{doctor_name}' is ambiguous: {names}")
            raise AmbiguousError(
                f"More than one doctor matches '{doctor_name}': {', '.join(names)}. "
                "Please say which one.",
                candidates=names,
            )
        return matches[0]

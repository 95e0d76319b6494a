"""Abstract base class for occupation-mapping providers."""

import logging
from abc import ABC, abstractmethod

from models.schemas.occupation import OccupationMappingResult
from models.schemas.skill import ExtractedSkill

logger = logging.getLogger(__name__)


class OccupationProvider(ABC):
    """Maps extracted skills onto standardized occupations.

    Subclasses must implement:
        - name: identifier used in the provider registry and in results
        - health_check(): cheap reachability probe, never raises
        - map_skills_to_occupations(skills): normalized mapping result;
          raises ProviderError on timeout, non-2xx or malformed payload
    """

    name: str = ""
    priority: int = 0  # higher is queried and merged first
    enabled: bool = True

    def is_configured(self) -> bool:
        """True when every credential the provider needs is present."""
        return True

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True when the provider can currently serve requests."""

    @abstractmethod
    async def map_skills_to_occupations(self, skills: list[ExtractedSkill]) -> OccupationMappingResult:
        """Map skills to occupations in this provider's taxonomy."""

    async def aclose(self) -> None:
        """Release network resources. No-op for local providers."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} priority={self.priority}>"


def unmapped_skill_names(skills: list[ExtractedSkill], occupations) -> list[str]:
    """Input skills that appear in none of the occupations' skill lists."""
    known = {s.name.lower() for occ in occupations for s in occ.skills}
    return [s.name for s in skills if s.name.lower() not in known]

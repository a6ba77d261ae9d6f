"""
Pydantic schemas for data crossing the service boundary.

Rows from Supabase and bodies from the REST API are validated here, so
the rest of the frontend works with known shapes instead of probing
nested dictionaries. Unknown fields are kept.
"""
import logging
from typing import Any, Iterable, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

M = TypeVar('M', bound=BaseModel)


class _Row(BaseModel):
    model_config = ConfigDict(extra='allow')


class LocalizedRow(_Row):
    """Row carrying ``name_<lang>`` columns."""

    name_en: Optional[str] = None
    name_de: Optional[str] = None
    name_fr: Optional[str] = None
    name_es: Optional[str] = None
    name_it: Optional[str] = None

    def localized_name(self, language: str, fallback: str = "") -> str:
        """Name in ``language``, then English, then ``fallback``."""
        value = getattr(self, f"name_{language}", None)
        if not value and self.model_extra:
            value = self.model_extra.get(f"name_{language}")
        return value or self.name_en or fallback


class LookupOption(LocalizedRow):
    """Specialty, language or session format from ``cs_lookup_options``."""

    id: Union[int, str]
    type: str
    code: str
    icon: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True


class City(LocalizedRow):
    """City from ``cs_cities``."""

    id: Union[int, str]
    code: str
    country_code: Optional[str] = None
    country_en: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True


class Certification(LocalizedRow):
    """Coaching certification body from ``cs_certifications``."""

    id: Union[int, str]
    code: str
    issuer: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True


class CoachSummary(_Row):
    """Coach as returned by search and listing endpoints."""

    id: Union[int, str]
    full_name: str = ""
    title: Optional[str] = None
    bio: Optional[str] = None
    hourly_rate: float = 0.0
    rating_average: Optional[float] = None
    rating_count: int = 0
    location_city: Optional[str] = None
    specialties: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=list)
    avatar_url: Optional[str] = None


class ErrorBody(_Row):
    """Error body returned by the REST API."""

    error: str = "RequestError"
    message: str = ""
    code: Optional[str] = None


def validate_rows(model: Type[M], rows: Iterable[Any], source: str = "") -> List[M]:
    """Validate rows against ``model``, skipping (and logging) invalid ones."""
    valid: List[M] = []
    for row in rows or []:
        try:
            valid.append(model.model_validate(row))
        except ValidationError as e:
            logger.warning(
                f"Skipping invalid {model.__name__} row{f' from {source}' if source else ''}: "
                f"{e.error_count()} error(s)"
            )
    return valid

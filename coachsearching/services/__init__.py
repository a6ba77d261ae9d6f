"""Services for the CoachSearching frontend."""
from coachsearching.services.api_client import (
    CoachSearchingAPIClient,
    StoredSessionTokenProvider,
    response_data,
)
from coachsearching.services.supabase_service import SupabaseService
from coachsearching.services.search import CoachSearch
from coachsearching.services.schemas import (
    LookupOption,
    City,
    Certification,
    CoachSummary,
    ErrorBody,
    validate_rows,
)

__all__ = [
    # REST API client
    "CoachSearchingAPIClient",
    "StoredSessionTokenProvider",
    "response_data",
    # Supabase
    "SupabaseService",
    # Search
    "CoachSearch",
    # Schemas
    "LookupOption",
    "City",
    "Certification",
    "CoachSummary",
    "ErrorBody",
    "validate_rows",
]

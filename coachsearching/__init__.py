"""CoachSearching Frontend Package.

Streamlit front-end core for the coaching marketplace with:
- Frozen dataclass configuration
- Hash-style router, links and redirects
- Shared application context with TTL-cached lookup tables
- REST API client with retry logic
- Supabase auth and database service
- Debounced coach search
"""

__version__ = "1.0.0"

"""
Application services layer (use cases).

Services orchestrate the domain logic to fulfill application use cases:
- DetailResolver: freshness gate, upstream fetch, stale fallback
- BackgroundPersister: fire-and-forget normalization into the store
- SeasonService, RelatedContentService, GenreSyncService

Services depend on ports (interfaces) from core/ and on the TMDB payload
parsers, never on concrete implementations from infrastructure/.
"""

"""
Business entities representing core domain concepts.

Exports:
- MediaType: movie or tv
- MediaRecord, Movie, TVShow: cached metadata records
- Genre, Person, CastCredit, CrewCredit: shared identities and credits
- Video, ProductionCompany, ProductionCountry, SpokenLanguage, Network
- SeasonSummary, Season, Episode: TV season data
- ContentSummary: list entry (related content, search, catalog)
"""

from cinifob.core.entities.media import (
    CastCredit,
    ContentSummary,
    CrewCredit,
    Episode,
    Genre,
    MediaRecord,
    MediaType,
    Movie,
    Network,
    Person,
    ProductionCompany,
    ProductionCountry,
    Season,
    SeasonSummary,
    SpokenLanguage,
    TVShow,
    Video,
)

__all__ = [
    "CastCredit",
    "ContentSummary",
    "CrewCredit",
    "Episode",
    "Genre",
    "MediaRecord",
    "MediaType",
    "Movie",
    "Network",
    "Person",
    "ProductionCompany",
    "ProductionCountry",
    "Season",
    "SeasonSummary",
    "SpokenLanguage",
    "TVShow",
    "Video",
]

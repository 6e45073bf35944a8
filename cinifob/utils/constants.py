"""
Constantes globales pour CiniFob.

Ce module contient les constantes utilisees dans l'application:
- Postes de l'equipe technique conserves lors de la normalisation
- Sous-ressources regroupees dans les requetes de fiche TMDB
- Limites des listes de contenus lies
- Listes du catalogue TMDB (recherche et navigation)
- Codes HTTP relances par le client upstream
"""

# Postes de l'equipe technique conserves (les autres sont ignores)
CREW_JOB_ALLOWLIST = frozenset({
    "Director",
    "Screenplay",
    "Writer",
    "Story",
    "Novel",
    "Producer",
    "Executive Producer",
    "Original Music Composer",
    "Director of Photography",
    "Editor",
    "Creator",
})

# Sous-ressources ajoutees a /movie/{id} et /tv/{id}
DETAIL_APPEND_TO_RESPONSE = "videos,credits"

# Relations disponibles pour /api/content/{type}/{id}/related
RELATION_SIMILAR = "similar"
RELATION_RECOMMENDATIONS = "recommendations"
RELATION_BOTH = "both"
RELATION_TYPES = frozenset({RELATION_SIMILAR, RELATION_RECOMMENDATIONS, RELATION_BOTH})

# TMDB refuse les pages au-dela de 500
MAX_RELATED_PAGES = 500

# Listes du catalogue par type de contenu (nom public -> chemin TMDB)
CATALOG_PATHS = {
    "movie": {
        "popular": "/movie/popular",
        "trending": "/trending/movie/week",
        "top_rated": "/movie/top_rated",
        "now_playing": "/movie/now_playing",
        "upcoming": "/movie/upcoming",
    },
    "tv": {
        "popular": "/tv/popular",
        "trending": "/trending/tv/week",
        "top_rated": "/tv/top_rated",
        "on_the_air": "/tv/on_the_air",
        "airing_today": "/tv/airing_today",
    },
}
CATALOG_DEFAULT_LIST = "popular"

# Listes disponibles pour les films et les series a la fois (type=all)
MIXED_CATALOG_LISTS = frozenset({"popular", "trending", "top_rated"})

# Types acceptes par /api/browse
BROWSE_ALL = "all"
BROWSE_TYPES = frozenset({BROWSE_ALL, "movie", "tv"})

# Listes acceptees par /api/movies/search (type=search par defaut)
MOVIE_SEARCH = "search"
MOVIE_SEARCH_LISTS = frozenset({MOVIE_SEARCH, "popular", "trending", "upcoming", "now_playing"})

# Premiers resultats de recherche enregistres dans le store
SEARCH_RESULTS_TO_STORE = 10

# Codes HTTP transitoires (429 + toute la plage 5xx)
RETRYABLE_STATUS_CODES = frozenset({429}) | frozenset(range(500, 600))

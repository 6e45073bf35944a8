"""Interface web (FastAPI) de CiniFob."""

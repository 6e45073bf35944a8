"""Routes HTTP de l'API CiniFob."""

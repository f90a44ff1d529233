"""Paths of the catalog API."""

MOVIES = "/api/movies/movies"
SCREENINGS = "/api/screenings/screenings"
LOGIN = "/api/users/loginCheck"
REGISTER = "/api/users/register"


def movie(movie_id: int) -> str:
    return f"{MOVIES}/{movie_id}"


def movie_detail(movie_id: int) -> str:
    return f"/api/movies/movie-by-id/{movie_id}"

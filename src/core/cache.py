"""
In-memory snapshots of the server lists and the projections built on them.
Snapshots are immutable tuples replaced wholesale; projections never mutate them.
"""

from collections.abc import Iterable, Iterator, Sequence

from models import (
    ALL_MOVIES_ID,
    ALL_MOVIES_TITLE,
    UNKNOWN_MOVIE_TITLE,
    Movie,
    Screening,
    ScreeningView,
)
from utils.logger import get_logger

logger = get_logger(__name__)


class JoinedScreenings:
    """
    Lazy, restartable view of the joined screenings.

    Bound to the two snapshots it was created from; each iteration joins again,
    so a later cache replacement never leaks into an existing view.
    """

    def __init__(self, movies: tuple[Movie, ...], screenings: tuple[Screening, ...]):
        self._movies = movies
        self._screenings = screenings

    def __iter__(self) -> Iterator[ScreeningView]:
        titles = {movie.id: movie.title for movie in self._movies}
        for screening in self._screenings:
            yield ScreeningView.from_screening(
                screening, titles.get(screening.movie_id, UNKNOWN_MOVIE_TITLE)
            )

    def __len__(self) -> int:
        return len(self._screenings)


def movie_matches(movie: Movie, term: str) -> bool:
    """Case-insensitive substring match on title, description and year."""
    needle = term.strip().lower()
    return (
        needle in (movie.title or "").lower()
        or needle in (movie.description or "").lower()
        or needle in str(movie.year)
    )


class EntityCache:
    """Last successfully fetched movies and screenings."""

    def __init__(self):
        self._movies: tuple[Movie, ...] = ()
        self._screenings: tuple[Screening, ...] = ()

    @property
    def movies(self) -> tuple[Movie, ...]:
        return self._movies

    @property
    def screenings(self) -> tuple[Screening, ...]:
        return self._screenings

    def replace_movies(self, movies: Iterable[Movie]) -> None:
        self._movies = tuple(movies)
        logger.debug("Movie cache replaced", count=len(self._movies))

    def replace_screenings(self, screenings: Iterable[Screening]) -> None:
        self._screenings = tuple(screenings)
        logger.debug("Screening cache replaced", count=len(self._screenings))

    def clear(self) -> None:
        self._movies = ()
        self._screenings = ()

    def movie_by_id(self, movie_id: int) -> Movie | None:
        return next((m for m in self._movies if m.id == movie_id), None)

    def contains_movie(self, movie_id: int) -> bool:
        return self.movie_by_id(movie_id) is not None

    def joined_screenings(self) -> JoinedScreenings:
        return JoinedScreenings(self._movies, self._screenings)

    def filter_movies_by_text(
        self, term: str | None, movies: Sequence[Movie] | None = None
    ) -> list[Movie]:
        """
        Movies matching the search term, in cache order.

        Args:
            term: Search text; blank means no filtering
            movies: Narrow an earlier result instead of the whole cache
        """
        source = self._movies if movies is None else movies
        if not term or not term.strip():
            return list(source)
        return [movie for movie in source if movie_matches(movie, term)]

    def filter_screenings_by_movie(self, movie_id: int | None) -> list[ScreeningView]:
        """Joined screenings of one movie (or all for None/0), earliest first."""
        joined = self.joined_screenings()
        if movie_id is None or movie_id == ALL_MOVIES_ID:
            selected = list(joined)
        else:
            selected = [s for s in joined if s.movie_id == movie_id]
        return sorted(selected, key=lambda s: s.time)

    def movie_filter_options(self) -> list[Movie]:
        """Selector entries for the screening filter, 'All movies' first."""
        return [Movie(id=ALL_MOVIES_ID, title=ALL_MOVIES_TITLE), *self._movies]

    def screening_movie_options(self) -> list[Movie]:
        """Selector entries for the new screening form."""
        return list(self._movies)


__all__ = ["EntityCache", "JoinedScreenings", "movie_matches"]

"""
Immutable records handed to the presentation layer.
"""

from dataclasses import dataclass, field
from enum import Enum

from core.editing import IDLE, CreatingMovie, CreatingScreening, EditingMovie, EditState
from core.session import SessionState
from models import ALL_MOVIES_ID, Movie, MovieForm, ScreeningForm, ScreeningView

NO_MOVIE_SELECTED = "No movie selected"


class AuthPanel(str, Enum):
    LOGIN = "login"
    REGISTER = "register"


class Level(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A message the user should see (the original showed a message box)."""

    level: Level
    title: str
    message: str


@dataclass(frozen=True)
class MovieDetail:
    title: str = NO_MOVIE_SELECTED
    year: str = ""
    description: str = ""

    @classmethod
    def from_movie(cls, movie: Movie) -> "MovieDetail":
        return cls(title=movie.title, year=str(movie.year), description=movie.description)


EMPTY_DETAIL = MovieDetail()


@dataclass(frozen=True)
class Visibility:
    """Which controls the presentation layer may show."""

    login_panel: bool
    register_panel: bool
    user_info: bool
    logged_in_as: str | None
    add_movie_button: bool
    add_screening_button: bool
    movie_actions: bool
    movie_panel: bool
    movie_panel_title: str
    save_button_label: str
    screening_panel: bool


def compute_visibility(
    session: SessionState, state: EditState, auth_panel: AuthPanel = AuthPanel.LOGIN
) -> Visibility:
    """Pure gating: mutating controls only ever appear for an admin session."""
    logged_in = session.is_logged_in
    admin = session.is_admin
    editing = isinstance(state, EditingMovie)
    return Visibility(
        login_panel=not logged_in and auth_panel == AuthPanel.LOGIN,
        register_panel=not logged_in and auth_panel == AuthPanel.REGISTER,
        user_info=logged_in,
        logged_in_as=session.user.username if logged_in else None,
        add_movie_button=admin,
        add_screening_button=admin,
        movie_actions=admin,
        movie_panel=admin and isinstance(state, (CreatingMovie, EditingMovie)),
        movie_panel_title="Edit movie" if editing else "Add new movie",
        save_button_label="Save changes" if editing else "Create",
        screening_panel=admin and isinstance(state, CreatingScreening),
    )


@dataclass(frozen=True)
class ViewState:
    """Everything the presentation layer renders, published after each intent."""

    movies: tuple[Movie, ...] = ()
    screenings: tuple[ScreeningView, ...] = ()
    movie_filter_options: tuple[Movie, ...] = ()
    screening_movie_options: tuple[Movie, ...] = ()
    selected_filter_id: int = ALL_MOVIES_ID
    search_term: str = ""
    auth_panel: AuthPanel = AuthPanel.LOGIN
    detail: MovieDetail = EMPTY_DETAIL
    edit_state: EditState = IDLE
    movie_form: MovieForm = field(default_factory=MovieForm)
    screening_form: ScreeningForm = field(default_factory=ScreeningForm)
    visibility: Visibility | None = None


__all__ = [
    "AuthPanel",
    "Level",
    "Notification",
    "MovieDetail",
    "EMPTY_DETAIL",
    "Visibility",
    "compute_visibility",
    "ViewState",
]

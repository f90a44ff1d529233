"""
Edit session state machine for the movie and screening panels.

    Idle --open_create_movie--> CreatingMovie --submit ok / cancel--> Idle
    Idle --open_edit_movie----> EditingMovie(id) --submit ok / cancel--> Idle
    Idle --open_create_screening--> CreatingScreening --submit ok / cancel--> Idle

Only admins may leave Idle. Losing admin rights forces Idle.
"""

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass

from api import routes
from api.client import ApiClient, ApiResult
from core.session import SessionState
from errors import ValidationError
from models import ALL_MOVIES_ID, Movie, MovieForm, ScreeningForm
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Idle:
    """No panel open."""


@dataclass(frozen=True)
class CreatingMovie:
    """Movie panel open for a new movie."""


@dataclass(frozen=True)
class EditingMovie:
    """Movie panel open on an existing movie."""

    movie_id: int


@dataclass(frozen=True)
class CreatingScreening:
    """Screening panel open."""


EditState = Idle | CreatingMovie | EditingMovie | CreatingScreening

IDLE = Idle()


class EditSessionController:
    """
    Owns the edit state and the pending form buffers.

    Args:
        session: Gates every transition out of Idle; watched for loss of admin rights
        api: Used by the submit operations
        on_saved: Awaited after a successful submit (the coordinator's refresh)
    """

    def __init__(
        self,
        session: SessionState,
        api: ApiClient,
        on_saved: Callable[[], Awaitable[None]] | None = None,
    ):
        self.session = session
        self.api = api
        self.on_saved = on_saved
        self.state: EditState = IDLE
        self.movie_form = MovieForm()
        self.screening_form = ScreeningForm()
        session.subscribe(self._on_session_change)

    @property
    def movie_panel_open(self) -> bool:
        return isinstance(self.state, (CreatingMovie, EditingMovie))

    @property
    def screening_panel_open(self) -> bool:
        return isinstance(self.state, CreatingScreening)

    @property
    def editing_movie_id(self) -> int | None:
        return self.state.movie_id if isinstance(self.state, EditingMovie) else None

    def _transition(self, state: EditState) -> None:
        if state != self.state:
            logger.debug("Edit state changed", old=repr(self.state), new=repr(state))
        self.state = state

    # ------------------------------------------------------------------
    # Movie panel
    # ------------------------------------------------------------------

    def open_create_movie(self) -> None:
        self.session.require_admin()
        self.screening_form = ScreeningForm()
        self.movie_form = MovieForm()
        self._transition(CreatingMovie())

    def open_edit_movie(self, movie: Movie) -> None:
        self.session.require_admin()
        if movie.id <= ALL_MOVIES_ID:
            raise ValidationError("Select a movie to edit.")
        self.screening_form = ScreeningForm()
        self.movie_form = MovieForm.from_movie(movie)
        self._transition(EditingMovie(movie.id))

    def cancel(self) -> None:
        """Close the movie panel, whatever the buffer holds."""
        self.movie_form = MovieForm()
        if self.movie_panel_open:
            self._transition(IDLE)

    async def submit_movie(self, form: MovieForm | None = None) -> ApiResult:
        """
        Validate the buffer, then PUT (editing) or POST (creating) it.

        Raises:
            PermissionDeniedError: the session is not admin
            ValidationError: the buffer is invalid; nothing was sent
            HttpError: the server rejected the request; state is unchanged
            TransportError: the server could not be reached; state is unchanged

        On success the panel closes, unless another one was opened meanwhile.
        """
        self.session.require_admin()
        if form is not None:
            self.movie_form = form
        state = self.state
        if not isinstance(state, (CreatingMovie, EditingMovie)):
            raise ValidationError("No movie is being created or edited.")

        payload = self.movie_form.to_payload(self.session.account_id)
        if isinstance(state, EditingMovie):
            result = await self.api.put(routes.movie(state.movie_id), payload)
        else:
            result = await self.api.post(routes.MOVIES, payload)
        result.raise_for_error()

        logger.info(
            "Movie saved",
            movie_id=state.movie_id if isinstance(state, EditingMovie) else None,
            title=payload.title,
        )
        # the user may have moved on to another panel while the request was in flight
        if self.state == state:
            self.cancel()
        if self.on_saved is not None:
            await self.on_saved()
        return result

    # ------------------------------------------------------------------
    # Screening panel
    # ------------------------------------------------------------------

    def open_create_screening(self) -> None:
        self.session.require_admin()
        self.movie_form = MovieForm()
        self.screening_form = ScreeningForm()
        self._transition(CreatingScreening())

    def cancel_screening(self) -> None:
        self.screening_form = ScreeningForm()
        if self.screening_panel_open:
            self._transition(IDLE)

    async def submit_screening(self, form: ScreeningForm | None = None) -> ApiResult:
        """
        Validate the buffer, then POST the new screening.

        Raises:
            PermissionDeniedError: the session is not admin
            ValidationError: the buffer is invalid; nothing was sent
            HttpError: the server rejected the request; state is unchanged
            TransportError: the server could not be reached; state is unchanged
        """
        self.session.require_admin()
        if form is not None:
            self.screening_form = form
        if not self.screening_panel_open:
            raise ValidationError("No screening is being created.")

        payload = self.screening_form.to_payload(self.session.account_id)
        result = await self.api.post(routes.SCREENINGS, payload)
        result.raise_for_error()

        logger.info("Screening created", movie_id=payload.movie_id, room=payload.room)
        if self.screening_panel_open:
            self.cancel_screening()
        if self.on_saved is not None:
            await self.on_saved()
        return result

    # ------------------------------------------------------------------
    # Forced closure
    # ------------------------------------------------------------------

    def force_close(self, reason: str) -> None:
        """Drop any open panel and both buffers."""
        if self.state != IDLE:
            logger.info("Edit session force-closed", state=repr(self.state), reason=reason)
        self.movie_form = MovieForm()
        self.screening_form = ScreeningForm()
        self._transition(IDLE)

    def close_if_missing(self, movie_ids: Iterable[int]) -> None:
        """Close the movie panel when the edited movie is no longer on the server."""
        editing = self.editing_movie_id
        if editing is not None and editing not in set(movie_ids):
            self.force_close("edited movie no longer exists")

    def _on_session_change(self, session: SessionState) -> None:
        if not session.is_admin and self.state != IDLE:
            self.force_close("admin rights lost")

    def reset(self) -> None:
        self.force_close("reset")


__all__ = [
    "EditSessionController",
    "EditState",
    "Idle",
    "CreatingMovie",
    "EditingMovie",
    "CreatingScreening",
    "IDLE",
]

"""
View coordinator: turns user intents into API calls, keeps the cache and
session in step, and republishes the view state.

Every intent method reports its failures as a Notification and returns
False; it never raises a ClientError to the presentation layer.
"""

import asyncio
from collections.abc import Callable

import httpx

from api import routes
from api.client import ApiClient
from config.settings import Settings, get_settings
from core.cache import EntityCache
from core.editing import EditSessionController
from core.session import SessionState
from core.view_models import (
    EMPTY_DETAIL,
    AuthPanel,
    Level,
    MovieDetail,
    Notification,
    ViewState,
    compute_visibility,
)
from errors import ClientError, PermissionDeniedError, ValidationError
from models import (
    ALL_MOVIES_ID,
    LoginRequest,
    LoginResponse,
    Movie,
    MovieDeleteRequest,
    MovieForm,
    RegisterRequest,
    RegisterResponse,
    Screening,
    ScreeningForm,
)
from utils.logger import get_logger

logger = get_logger(__name__)

ViewListener = Callable[[ViewState], None]
MessageListener = Callable[[Notification], None]


class ViewCoordinator:
    """
    Context object of one client: API client, session, cache and edit session.

    Args:
        api: Client used for every request; should read its token from `session`
        session: Shared authentication state
        cache: Entity snapshots, a fresh one by default
    """

    def __init__(
        self,
        api: ApiClient,
        session: SessionState,
        cache: EntityCache | None = None,
    ):
        self.api = api
        self.session = session
        self.cache = cache or EntityCache()
        self.editor = EditSessionController(session, api, on_saved=self.refresh_all)
        self.search_term = ""
        self.selected_filter_id = ALL_MOVIES_ID
        self.detail = EMPTY_DETAIL
        self.auth_panel = AuthPanel.LOGIN
        self.view = ViewState()
        self._view_listeners: list[ViewListener] = []
        self._message_listeners: list[MessageListener] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> ViewState:
        """Publish the anonymous view, then load the catalog."""
        self.publish()
        await self.refresh_all()
        return self.view

    async def reset(self) -> ViewState:
        """Back to a fresh, logged out, empty context, then reload."""
        self.session.reset()
        self.editor.reset()
        self.cache.clear()
        self.search_term = ""
        self.selected_filter_id = ALL_MOVIES_ID
        self.detail = EMPTY_DETAIL
        self.auth_panel = AuthPanel.LOGIN
        return await self.initialize()

    async def aclose(self) -> None:
        await self.api.aclose()

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    def subscribe(self, listener: ViewListener) -> None:
        self._view_listeners.append(listener)

    def on_message(self, listener: MessageListener) -> None:
        self._message_listeners.append(listener)

    def publish(self) -> ViewState:
        """Rebuild the view state from the cache and the current context."""
        self.view = ViewState(
            movies=tuple(self.cache.filter_movies_by_text(self.search_term)),
            screenings=tuple(self.cache.filter_screenings_by_movie(self.selected_filter_id)),
            movie_filter_options=tuple(self.cache.movie_filter_options()),
            screening_movie_options=tuple(self.cache.screening_movie_options()),
            selected_filter_id=self.selected_filter_id,
            search_term=self.search_term,
            auth_panel=self.auth_panel,
            detail=self.detail,
            edit_state=self.editor.state,
            movie_form=self.editor.movie_form.model_copy(),
            screening_form=self.editor.screening_form.model_copy(),
            visibility=compute_visibility(self.session, self.editor.state, self.auth_panel),
        )
        for listener in list(self._view_listeners):
            listener(self.view)
        return self.view

    def notify(self, level: Level, title: str, message: str) -> None:
        notification = Notification(level, title, message)
        logger.info("Notification", kind=level.value, title=title, message=message)
        for listener in list(self._message_listeners):
            listener(notification)

    def report(self, title: str, error: ClientError) -> None:
        local = isinstance(error, (ValidationError, PermissionDeniedError))
        self.notify(Level.WARNING if local else Level.ERROR, title, str(error))

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def _fetch_list(
        self, path: str, model: type, failure_title: str
    ) -> tuple[list, bool]:
        """One list fetch; failures are reported and yield ([], False)."""
        try:
            result = await self.api.get(path)
            if result.status == httpx.codes.UNAUTHORIZED:
                self.session.invalidate()
            return result.parse_list(model), True
        except ClientError as e:
            self.report(failure_title, e)
            return [], False

    async def refresh_all(self) -> None:
        """
        Reload movies and screenings, then republish.

        Both fetches run concurrently and fail independently; the caches are
        only replaced once both have settled. Concurrent refreshes are not
        fenced: whichever finishes last wins.
        """
        (movies, movies_ok), (screenings, _) = await asyncio.gather(
            self._fetch_list(routes.MOVIES, Movie, "Loading movies failed"),
            self._fetch_list(routes.SCREENINGS, Screening, "Loading screenings failed"),
        )
        self.cache.replace_movies(movies)
        self.cache.replace_screenings(screenings)
        if movies_ok:
            # a failed fetch says nothing about whether the edited movie still exists
            self.editor.close_if_missing(movie.id for movie in movies)
        self.search_term = ""
        self.selected_filter_id = ALL_MOVIES_ID
        logger.info("Catalog refreshed", movies=len(movies), screenings=len(screenings))
        self.publish()

    # ------------------------------------------------------------------
    # Browsing
    # ------------------------------------------------------------------

    def search(self, term: str | None) -> ViewState:
        self.search_term = term or ""
        return self.publish()

    def clear_search(self) -> ViewState:
        return self.search("")

    def select_screening_filter(self, movie_id: int | None) -> ViewState:
        self.selected_filter_id = movie_id or ALL_MOVIES_ID
        return self.publish()

    async def select_movie(self, movie: Movie | None) -> bool:
        """Load the detail of the selected movie; no selection clears it."""
        if movie is None or movie.id <= ALL_MOVIES_ID:
            self.detail = EMPTY_DETAIL
            self.publish()
            return True
        try:
            result = await self.api.get(routes.movie_detail(movie.id))
            loaded = result.parse(Movie)
        except ClientError as e:
            self.detail = EMPTY_DETAIL
            self.report("Loading movie failed", e)
            self.publish()
            return False
        self.detail = MovieDetail.from_movie(loaded)
        self.publish()
        return True

    # ------------------------------------------------------------------
    # Account
    # ------------------------------------------------------------------

    def show_register(self) -> ViewState:
        self.auth_panel = AuthPanel.REGISTER
        return self.publish()

    def show_login(self) -> ViewState:
        self.auth_panel = AuthPanel.LOGIN
        return self.publish()

    async def login(self, email_address: str, password: str) -> bool:
        try:
            result = await self.api.post(
                routes.LOGIN, LoginRequest(email_address=email_address, password=password)
            )
            response = result.parse(LoginResponse)
            user = response.user
            if not response.success or user is None or user.id <= 0 or not response.token:
                message = response.message or "Unknown error."
                if user is None or user.id <= 0:
                    message += " (incomplete user data)"
                elif not response.token:
                    message += " (missing token)"
                raise ValidationError(message)
        except ClientError as e:
            self.report("Login failed", e)
            self.publish()
            return False

        self.session.login(response.token, user)
        self.auth_panel = AuthPanel.LOGIN
        self.notify(Level.INFO, "Login successful", response.message or "Logged in.")
        await self.refresh_all()
        return True

    async def register(
        self, username: str, email_address: str, password: str, confirm_password: str
    ) -> bool:
        try:
            if password != confirm_password:
                raise ValidationError("The passwords do not match!")
            result = await self.api.post(
                routes.REGISTER,
                RegisterRequest(
                    username=username, email_address=email_address, password=password
                ),
            )
            response = result.parse(RegisterResponse)
            if not response.success:
                raise ValidationError(response.display_message() or "Unknown error.")
        except ClientError as e:
            self.report("Registration failed", e)
            self.publish()
            return False

        self.notify(Level.INFO, "Registration", response.message or "Registration successful!")
        self.show_login()
        return True

    async def logout(self) -> None:
        """Drop the session (which force-closes admin panels) and reload anonymously."""
        self.session.logout()
        self.detail = EMPTY_DETAIL
        self.auth_panel = AuthPanel.LOGIN
        self.notify(Level.INFO, "Logout", "You have been logged out.")
        await self.refresh_all()

    # ------------------------------------------------------------------
    # Movie editing
    # ------------------------------------------------------------------

    def _attempt(self, title: str, action: Callable, *args) -> bool:
        try:
            action(*args)
        except ClientError as e:
            self.report(title, e)
            self.publish()
            return False
        self.publish()
        return True

    def open_create_movie(self) -> bool:
        return self._attempt("Add movie", self.editor.open_create_movie)

    def _open_cached_movie(self, movie: Movie) -> None:
        self.session.require_admin()
        if movie.id > ALL_MOVIES_ID and not self.cache.contains_movie(movie.id):
            raise ValidationError("This movie is not in the catalog. Refresh and try again.")
        self.editor.open_edit_movie(movie)

    def open_edit_movie(self, movie: Movie) -> bool:
        return self._attempt("Edit movie", self._open_cached_movie, movie)

    def cancel_movie(self) -> ViewState:
        self.editor.cancel()
        return self.publish()

    async def submit_movie(self, form: MovieForm | None = None) -> bool:
        editing = self.editor.editing_movie_id is not None
        try:
            await self.editor.submit_movie(form)
        except ClientError as e:
            self.report("Saving movie failed", e)
            self.publish()
            return False
        self.notify(Level.INFO, "Success", "Movie updated!" if editing else "Movie created!")
        self.publish()
        return True

    async def delete_movie(self, movie: Movie) -> bool:
        """Delete a movie (the server drops its screenings too), then reload."""
        try:
            self.session.require_admin()
            if movie.id <= ALL_MOVIES_ID:
                raise ValidationError("Select a movie to delete.")
            result = await self.api.delete(
                routes.movie(movie.id),
                MovieDeleteRequest(account_id=self.session.account_id),
            )
            result.raise_for_error()
        except ClientError as e:
            self.report("Deleting movie failed", e)
            self.publish()
            return False
        logger.info("Movie deleted", movie_id=movie.id)
        self.notify(Level.INFO, "Success", f"'{movie.title}' deleted.")
        await self.refresh_all()
        return True

    # ------------------------------------------------------------------
    # Screening editing
    # ------------------------------------------------------------------

    def open_create_screening(self) -> bool:
        return self._attempt("Add screening", self.editor.open_create_screening)

    def cancel_screening(self) -> ViewState:
        self.editor.cancel_screening()
        return self.publish()

    async def submit_screening(self, form: ScreeningForm | None = None) -> bool:
        try:
            await self.editor.submit_screening(form)
        except ClientError as e:
            self.report("Saving screening failed", e)
            self.publish()
            return False
        self.notify(Level.INFO, "Success", "Screening created!")
        self.publish()
        return True


def create_coordinator(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ViewCoordinator:
    """Wire a session, an API client reading that session, and a coordinator."""
    settings = settings or get_settings()
    session = SessionState()
    api = ApiClient(
        session,
        base_url=settings.api_base_url,
        timeout=settings.request_timeout,
        transport=transport,
    )
    return ViewCoordinator(api, session)


__all__ = ["ViewCoordinator", "create_coordinator"]

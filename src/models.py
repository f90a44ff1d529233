"""
Data models for the cinema admin client.
Pydantic models mirroring the catalog API (camelCase on the wire),
plus the client-only view records and form buffers.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from errors import ValidationError

# Sentinel id for "no selection" / "all movies"
ALL_MOVIES_ID = 0
ALL_MOVIES_TITLE = "All movies"
UNKNOWN_MOVIE_TITLE = "Unknown"

MIN_MOVIE_YEAR = 1800
YEARS_AHEAD = 10

SCREENING_TIME_FORMATS = (
    "%Y-%m-%d %H:%M",
    "%Y. %m. %d. %H:%M",
    "%Y.%m.%d %H:%M",
    "%Y/%m/%d %H:%M",
)
DISPLAY_TIME_FORMAT = "%Y. %m. %d. %H:%M"


def max_movie_year() -> int:
    """Latest accepted release year."""
    return datetime.now().year + YEARS_AHEAD


def join_messages(message: str | None, messages: list[str] | None) -> str | None:
    """A populated 'messages' list wins over 'message' and becomes a multi-line report."""
    if messages:
        return "\n".join(messages)
    return message


class WireModel(BaseModel):
    """Base for everything that crosses the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


# --------------------------------------------------------------------------
# Entities
# --------------------------------------------------------------------------


class Movie(WireModel):
    """Movie as served by /api/movies."""

    model_config = ConfigDict(frozen=True)

    id: int = 0
    title: str = ""
    description: str = ""
    year: int = 0
    image_url: str = Field("", alias="img")
    created_by_name: str | None = Field(None, alias="adminName")

    @field_validator("title", "description", "image_url", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return "" if v is None else v


class Screening(WireModel):
    """Screening as served by /api/screenings."""

    model_config = ConfigDict(frozen=True)

    id: int = 0
    movie_id: int
    room: str = ""
    time: datetime
    created_by_name: str | None = Field(None, alias="adminName")


class ScreeningView(BaseModel):
    """A screening joined with its movie title. Client only, never sent."""

    model_config = ConfigDict(frozen=True)

    id: int
    movie_id: int
    room: str
    time: datetime
    created_by_name: str | None = None
    movie_title: str

    @classmethod
    def from_screening(cls, screening: Screening, movie_title: str) -> "ScreeningView":
        return cls(
            id=screening.id,
            movie_id=screening.movie_id,
            room=screening.room,
            time=screening.time,
            created_by_name=screening.created_by_name,
            movie_title=movie_title,
        )

    @property
    def display_info(self) -> str:
        return (
            f"{self.movie_title} - {self.room} terem - "
            f"{self.time.strftime(DISPLAY_TIME_FORMAT)}"
        )


class User(WireModel):
    """Logged in account."""

    model_config = ConfigDict(frozen=True)

    id: int = 0
    username: str | None = None
    email_address: str | None = None
    is_admin: bool = False


# --------------------------------------------------------------------------
# Requests / responses
# --------------------------------------------------------------------------


class LoginRequest(WireModel):
    email_address: str
    password: str


class LoginResponse(WireModel):
    success: bool = False
    message: str | None = None
    token: str | None = None
    user: User | None = None


class RegisterRequest(WireModel):
    username: str
    email_address: str
    password: str


class RegisteredUser(WireModel):
    account_id: int = 0
    username: str | None = None
    email_address: str | None = None


class RegisterResponse(WireModel):
    success: bool = False
    message: str | None = None
    messages: list[str] | None = None
    user: RegisteredUser | None = None

    def display_message(self) -> str | None:
        return join_messages(self.message, self.messages)


class ErrorBody(WireModel):
    """Error payload returned with non-2xx responses."""

    message: str | None = None
    messages: list[str] | None = None
    success: bool | None = None

    def display_message(self) -> str | None:
        return join_messages(self.message, self.messages)


class MoviePayload(WireModel):
    """Body of POST/PUT /api/movies/movies."""

    title: str
    description: str
    year: int
    image_url: str = Field(alias="img")
    account_id: int

    @field_validator("title", "description", "image_url")
    @classmethod
    def not_blank(cls, v, info):
        if not v or not v.strip():
            raise ValueError(f"{info.field_name.replace('_', ' ')} must not be empty")
        return v

    @field_validator("year")
    @classmethod
    def year_in_range(cls, v):
        if v < MIN_MOVIE_YEAR or v > max_movie_year():
            raise ValueError("year out of range")
        return v


class MovieDeleteRequest(WireModel):
    account_id: int


class ScreeningPayload(WireModel):
    """Body of POST /api/screenings/screenings."""

    movie_id: int = Field(gt=0)
    room: str
    time: datetime
    account_id: int

    @field_validator("room")
    @classmethod
    def room_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("room must not be empty")
        return v


def _validation_error(exc: PydanticValidationError) -> ValidationError:
    """Flatten pydantic errors into a single user facing ValidationError."""
    lines = []
    for err in exc.errors():
        ctx_error = (err.get("ctx") or {}).get("error")
        lines.append(str(ctx_error) if ctx_error else err["msg"])
    return ValidationError("\n".join(lines))


def parse_screening_time(text: str) -> datetime:
    """Parse user input into a datetime, ISO 8601 first, then the accepted layouts."""
    value = (text or "").strip()
    if not value:
        raise ValidationError("screening time is required")
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass
    for fmt in SCREENING_TIME_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValidationError("invalid date format, use YYYY-MM-DD HH:MM")


# --------------------------------------------------------------------------
# Form buffers
# --------------------------------------------------------------------------


class MovieForm(BaseModel):
    """Raw input of the movie panel."""

    title: str = ""
    description: str = ""
    year: str = ""
    image_url: str = ""

    @classmethod
    def from_movie(cls, movie: Movie) -> "MovieForm":
        return cls(
            title=movie.title,
            description=movie.description,
            year=str(movie.year),
            image_url=movie.image_url,
        )

    def to_payload(self, account_id: int) -> MoviePayload:
        """
        Validate the buffer and build the request body.

        Raises:
            ValidationError: year is not a number or out of range, or a field is blank
        """
        try:
            year = int(self.year.strip())
        except ValueError:
            raise ValidationError("year must be a whole number") from None
        try:
            return MoviePayload(
                title=self.title,
                description=self.description,
                year=year,
                image_url=self.image_url,
                account_id=account_id,
            )
        except PydanticValidationError as e:
            raise _validation_error(e) from None


class ScreeningForm(BaseModel):
    """Raw input of the screening panel."""

    movie_id: int | None = None
    room: str = ""
    time: str = ""

    def to_payload(self, account_id: int) -> ScreeningPayload:
        """
        Validate the buffer and build the request body.

        Raises:
            ValidationError: no movie selected, blank room or unparseable time
        """
        if self.movie_id is None or self.movie_id <= ALL_MOVIES_ID:
            raise ValidationError("select a movie for the screening")
        if not self.room.strip():
            raise ValidationError("room must not be empty")
        time = parse_screening_time(self.time)
        try:
            return ScreeningPayload(
                movie_id=self.movie_id, room=self.room, time=time, account_id=account_id
            )
        except PydanticValidationError as e:
            raise _validation_error(e) from None

"""
Async HTTP client for the cinema catalog API.
Every call returns an ApiResult; only transport faults raise.
"""

from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from config.settings import get_settings
from errors import HttpError, TransportError, ValidationError
from models import ErrorBody
from utils.logger import get_logger

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class TokenSource(Protocol):
    """Anything exposing the current bearer token (SessionState does)."""

    @property
    def token(self) -> str | None: ...


@dataclass(frozen=True)
class ApiResult:
    """Outcome of one request: either ok with a body, or failed with an error body."""

    ok: bool
    status: int
    body: Any = None
    error_body: ErrorBody | None = None

    def error_message(self) -> str:
        """Server message for display; 'messages' wins over 'message'."""
        if self.error_body is not None:
            message = self.error_body.display_message()
            if message:
                return message
        return f"HTTP {self.status}"

    def raise_for_error(self) -> "ApiResult":
        if not self.ok:
            raise HttpError(self.status, self.error_message())
        return self

    def parse(self, model: type[ModelT]) -> ModelT:
        """
        Validate the success body as a single model.

        Raises:
            HttpError: the result is not ok
            ValidationError: the body does not match the model
        """
        self.raise_for_error()
        if self.body is None:
            raise ValidationError(f"Empty {model.__name__} response")
        try:
            return model.model_validate(self.body)
        except PydanticValidationError as e:
            raise ValidationError(f"Malformed {model.__name__} response: {e}") from e

    def parse_list(self, model: type[ModelT]) -> list[ModelT]:
        """Validate the success body as a list of models; a null body is an empty list."""
        self.raise_for_error()
        try:
            return TypeAdapter(list[model]).validate_python(self.body or [])
        except PydanticValidationError as e:
            raise ValidationError(f"Malformed {model.__name__} list: {e}") from e


def encode_body(body: Any) -> Any:
    """JSON-ready body with camelCase keys; None fields are dropped, not sent as null."""
    if body is None:
        return None
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(body, dict):
        return {key: value for key, value in body.items() if value is not None}
    return body


def _error_body(response: httpx.Response) -> ErrorBody:
    try:
        data = response.json()
        if isinstance(data, dict):
            return ErrorBody.model_validate(data)
    except (ValueError, PydanticValidationError):
        pass
    return ErrorBody(message=response.text or None)


def _success_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise ValidationError(
            f"Unreadable response from {response.request.url.path}"
        ) from e


class ApiClient:
    """
    Thin async wrapper around httpx for the catalog API.

    Args:
        session: Token source read on every request, None for anonymous use
        base_url: Defaults to settings.api_base_url
        timeout: Seconds, defaults to settings.request_timeout
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        session: TokenSource | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.session = session
        self.base_url = base_url or settings.api_base_url
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.request_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.session.token if self.session is not None else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(self, method: str, path: str, body: Any = None) -> ApiResult:
        """
        Send one request.

        Raises:
            TransportError: no HTTP answer was received
            ValidationError: a 2xx answer carried an unreadable body
        """
        try:
            response = await self._client.request(
                method, path, json=encode_body(body), headers=self._headers()
            )
        except httpx.RequestError as e:
            logger.error("Request failed", method=method, path=path, error=str(e))
            raise TransportError(f"{method} {path} failed: {e}") from e

        if response.is_success:
            logger.debug("Request ok", method=method, path=path, status=response.status_code)
            return ApiResult(True, response.status_code, body=_success_body(response))

        logger.warning(
            "Request rejected", method=method, path=path, status=response.status_code
        )
        return ApiResult(False, response.status_code, error_body=_error_body(response))

    async def get(self, path: str) -> ApiResult:
        return await self.request("GET", path)

    async def post(self, path: str, body: Any = None) -> ApiResult:
        return await self.request("POST", path, body)

    async def put(self, path: str, body: Any = None) -> ApiResult:
        return await self.request("PUT", path, body)

    async def delete(self, path: str, body: Any = None) -> ApiResult:
        return await self.request("DELETE", path, body)


__all__ = ["ApiClient", "ApiResult", "TokenSource", "encode_body"]

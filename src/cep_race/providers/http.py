"""Shared plumbing for providers backed by a JSON-over-HTTP API."""
from __future__ import annotations

from abc import abstractmethod
import asyncio
from collections.abc import Callable, Mapping
import os
import threading
from typing import Any, ClassVar, Protocol

import requests
from requests import exceptions as requests_exceptions

from ..cancellation import CancelToken
from ..errors import ProviderError, ProviderErrorKind
from ..models import Address
from ..utils import clean_text, digits_only
from .base import BaseProvider

__all__ = [
    "DEFAULT_HTTP_TIMEOUT_S",
    "HttpProvider",
    "SessionFactory",
    "ResponseProtocol",
    "SessionProtocol",
]

DEFAULT_HTTP_TIMEOUT_S = 10.0
_BODY_PREVIEW_CHARS = 200


class ResponseProtocol(Protocol):
    status_code: int
    text: str

    def json(self) -> Any: ...
    def close(self) -> None: ...


class SessionProtocol(Protocol):
    def get(self, url: str, *args: Any, **kwargs: Any) -> ResponseProtocol: ...
    def close(self) -> None: ...


SessionFactory = Callable[[], SessionProtocol]


def _preview(response: ResponseProtocol) -> str:
    try:
        body = response.text or ""
    except Exception:  # noqa: BLE001 - undecodable body
        return ""
    return body[:_BODY_PREVIEW_CHARS]


def _settle(future: asyncio.Future[Address], result: Address | None, error: Exception | None) -> None:
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)  # type: ignore[arg-type]


class HttpProvider(BaseProvider):
    """Run a blocking ``requests`` call on a daemon worker thread.

    Every attempt opens its own session, which is closed as soon as the cancel
    token fires. The awaiting coroutine returns at that moment; whatever the
    worker thread receives afterwards is closed and dropped.

    ``session`` injects one shared session (left open, mainly for tests);
    ``session_factory`` replaces the per-attempt ``requests.Session``.
    """

    default_base_url: ClassVar[str]
    base_url_env: ClassVar[str | None] = None
    headers: ClassVar[Mapping[str, str]] = {"Accept": "application/json"}

    def __init__(
        self,
        *,
        name: str,
        session: SessionProtocol | None = None,
        session_factory: SessionFactory | None = None,
        base_url: str | None = None,
        timeout_s: float | None = None,
    ) -> None:
        super().__init__(name=name)
        if session is not None and session_factory is not None:
            raise ValueError("pass either session or session_factory, not both")
        self._session = session
        self._session_factory: SessionFactory = session_factory or requests.Session
        env_url = os.getenv(self.base_url_env) if self.base_url_env else None
        self._base_url = (base_url or env_url or self.default_base_url).rstrip("/")
        self._timeout_s = DEFAULT_HTTP_TIMEOUT_S if timeout_s is None else float(timeout_s)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    @abstractmethod
    def build_url(self, digits: str) -> str: ...

    @abstractmethod
    def parse_payload(self, payload: Any) -> Address: ...

    async def lookup(self, postal_code: str, cancel: CancelToken) -> Address:
        digits = digits_only(postal_code)
        if not digits:
            raise self.error(ProviderErrorKind.NOT_FOUND, "postal code has no digits")
        url = self.build_url(digits)
        loop = asyncio.get_running_loop()
        done: asyncio.Future[Address] = loop.create_future()

        def _worker() -> None:
            result: Address | None = None
            error: Exception | None = None
            try:
                result = self._fetch(url, cancel)
            except Exception as exc:  # noqa: BLE001 - re-raised on the loop
                error = exc
            try:
                loop.call_soon_threadsafe(_settle, done, result, error)
            except RuntimeError:
                # The loop is gone; nobody is waiting for this attempt any more.
                pass

        threading.Thread(target=_worker, name=f"cep-race-{self.name()}", daemon=True).start()

        waiter = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait((done, waiter), return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not done.done():
                done.cancel()
        if done.cancelled():
            raise self.error(ProviderErrorKind.PROVIDER_UNAVAILABLE, "cancelled while in flight")
        return done.result()

    def _open_session(self, cancel: CancelToken) -> tuple[SessionProtocol, bool]:
        if self._session is not None:
            return self._session, False
        session = self._session_factory()
        cancel.add_callback(session.close)
        return session, True

    def _fetch(self, url: str, cancel: CancelToken) -> Address:
        if cancel.cancelled:
            raise self.error(ProviderErrorKind.PROVIDER_UNAVAILABLE, "cancelled before request")
        session, owned = self._open_session(cancel)
        try:
            return self._request(session, url, cancel)
        finally:
            if owned:
                session.close()

    def _request(self, session: SessionProtocol, url: str, cancel: CancelToken) -> Address:
        try:
            response = session.get(url, headers=dict(self.headers), timeout=self._timeout_s)
        except requests_exceptions.Timeout as exc:
            raise self.error(ProviderErrorKind.TIMEOUT, str(exc)) from exc
        except requests_exceptions.ConnectionError as exc:
            raise self.error(ProviderErrorKind.NETWORK_FAILURE, str(exc)) from exc
        except requests_exceptions.RequestException as exc:
            raise self.error(ProviderErrorKind.NETWORK_FAILURE, str(exc)) from exc

        try:
            if cancel.cancelled:
                raise self.error(
                    ProviderErrorKind.PROVIDER_UNAVAILABLE, "cancelled while in flight"
                )
            self.check_status(response)
            payload = self.decode(response)
            return self.parse_payload(payload)
        finally:
            response.close()

    def check_status(self, response: ResponseProtocol) -> None:
        code = int(response.status_code)
        if 200 <= code < 300:
            return
        message = f"HTTP {code}"
        if code in {400, 404}:
            raise self.error(ProviderErrorKind.NOT_FOUND, message)
        if code in {408, 504}:
            raise self.error(ProviderErrorKind.TIMEOUT, message)
        raise self.error(ProviderErrorKind.PROVIDER_UNAVAILABLE, message)

    def decode(self, response: ResponseProtocol) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise self.error(
                ProviderErrorKind.MALFORMED_RESPONSE,
                f"invalid JSON body: {_preview(response)!r}",
            ) from exc

    def require(self, payload: Mapping[str, Any], key: str) -> str:
        value = clean_text(payload.get(key))
        if not value:
            raise self.error(
                ProviderErrorKind.MALFORMED_RESPONSE, f"missing field {key!r}"
            )
        return value

    def ensure_mapping(self, payload: Any) -> Mapping[str, Any]:
        if not isinstance(payload, Mapping):
            raise self.error(
                ProviderErrorKind.MALFORMED_RESPONSE,
                f"expected a JSON object, got {type(payload).__name__}",
            )
        return payload

    def not_found(self, message: str = "postal code not found") -> ProviderError:
        return self.error(ProviderErrorKind.NOT_FOUND, message)

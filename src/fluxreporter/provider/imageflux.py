import enum
from typing import Any, Mapping

import httpx
import structlog

from fluxreporter.errors import AuthenticationError, TransportError, URLError

logger = structlog.get_logger()

CONSOLE_BASE_URL = "https://console.imageflux.jp"
LOGIN_PATH = "auth/login"


class SessionState(enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class ImageFluxClient:
    """
    ImageFluxClient owns a cookie-backed session against the ImageFlux
    web console. Logging in populates the client's cookie jar, which
    every later request sends implicitly. The session state lives on
    the instance, so independent clients never share a login.
    """

    def __init__(
        self,
        email: "str",
        password: "str",
        base_url: "str" = CONSOLE_BASE_URL,
        timeout: "float" = 10.0,
    ) -> "None":
        self._email = email
        self._password = password
        self._base_url = base_url.rstrip("/")
        self._client: "httpx.AsyncClient" = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
        )
        self._state: "SessionState" = SessionState.UNAUTHENTICATED
        logger.debug("imageflux_client_created", base_url=self._base_url)

    @property
    def state(self) -> "SessionState":
        return self._state

    @property
    def authenticated(self) -> "bool":
        return self._state is SessionState.AUTHENTICATED

    @property
    def cookies(self) -> "httpx.Cookies":
        return self._client.cookies

    async def close(self) -> "None":
        """
        closes the underlying HTTP client.
        """
        await self._client.aclose()

    def build_url(
        self,
        path: "str",
        query: "Mapping[str, Any] | None" = None,
    ) -> "httpx.URL":
        """
        joins the console base URL with path and attaches query
        parameters.
        """
        try:
            return httpx.URL(f"{self._base_url}/{path}", params=query or None)
        except httpx.InvalidURL as exc:
            logger.debug("url_build_failed", path=path)
            raise URLError(str(exc), {"path": path}) from exc

    def build_request(
        self,
        method: "str",
        url: "httpx.URL",
        **kwargs: "Any",
    ) -> "httpx.Request":
        """
        builds a request bound to this session's cookies and defaults.
        """
        return self._client.build_request(method, url, **kwargs)

    async def send(self, request: "httpx.Request") -> "httpx.Response":
        """
        sends request through the session transport. Network level
        failures are raised as TransportError, never retried.
        """
        try:
            return await self._client.send(request)
        except httpx.TransportError as exc:
            logger.debug(
                "request_failed",
                method=request.method,
                url=str(request.url),
                error=str(exc),
            )
            raise TransportError(
                f"{request.method} request failed: {exc!r}",
                {"method": request.method, "url": str(request.url)},
            ) from exc

    async def ensure_authenticated(self) -> "None":
        """
        logs in with the configured credentials unless this client
        already did. A rejected login raises AuthenticationError.
        """
        if self._state is SessionState.AUTHENTICATED:
            logger.debug("already_authenticated")
            return

        url = self.build_url(LOGIN_PATH)
        request = self.build_request(
            "POST",
            url,
            data={"email_address": self._email, "password": self._password},
        )

        resp = await self.send(request)
        if resp.status_code != 200:
            logger.debug(
                "login_rejected",
                url=str(url),
                status_code=resp.status_code,
                body=resp.text,
            )
            raise AuthenticationError(
                "console rejected the login",
                resp.status_code,
                {"url": str(url)},
            )

        self._state = SessionState.AUTHENTICATED
        logger.debug("login_succeeded")

"""Cookie transport for the access / refresh credentials."""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from fastapi import Request, Response

from app.core.config import Settings, get_settings

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


@dataclass(frozen=True)
class ExtractedTokens:
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None


class CookieTransport:
    """httpOnly, SameSite=strict cookies; Secure outside local development."""

    samesite = "strict"

    def __init__(
        self,
        access_max_age: int,
        refresh_max_age: int,
        secure: bool,
        domain: Optional[str] = None,
    ):
        self.access_max_age = access_max_age
        self.refresh_max_age = refresh_max_age
        self.secure = secure
        self.domain = domain

    @classmethod
    def from_settings(cls, settings: Settings) -> "CookieTransport":
        return cls(
            access_max_age=settings.access_token_max_age,
            refresh_max_age=settings.refresh_token_max_age,
            secure=settings.cookie_secure,
            domain=settings.cookie_domain,
        )

    def _set(self, response: Response, name: str, value: str, max_age: int) -> None:
        response.set_cookie(
            name,
            value,
            max_age=max_age,
            path="/",
            domain=self.domain,
            secure=self.secure,
            httponly=True,
            samesite=self.samesite,
        )

    def attach(
        self,
        response: Response,
        access_token: str,
        refresh_token: Optional[str] = None,
    ) -> None:
        """Set the access cookie, and the refresh cookie when one is given."""
        self._set(response, ACCESS_COOKIE, access_token, self.access_max_age)
        if refresh_token is not None:
            self._set(response, REFRESH_COOKIE, refresh_token, self.refresh_max_age)

    @staticmethod
    def extract(request: Request) -> ExtractedTokens:
        return ExtractedTokens(
            access_token=request.cookies.get(ACCESS_COOKIE) or None,
            refresh_token=request.cookies.get(REFRESH_COOKIE) or None,
        )

    def clear(self, response: Response) -> None:
        for name in (ACCESS_COOKIE, REFRESH_COOKIE):
            response.delete_cookie(
                name,
                path="/",
                domain=self.domain,
                secure=self.secure,
                httponly=True,
                samesite=self.samesite,
            )


@lru_cache()
def get_cookie_transport() -> CookieTransport:
    return CookieTransport.from_settings(get_settings())

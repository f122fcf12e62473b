"""Session cookie helpers.

The session cookie lives for the browser session. With remember-me the
same token is also written to a long-lived cookie, which is used when the
session cookie is gone.
"""

from __future__ import annotations

from fastapi import Response

from infrastructure.settings import get_session_settings


def set_session_cookies(
    response: Response,
    token: str,
    remember_me: bool,
    remember_me_max_age_seconds: int | None = None,
) -> None:
    settings = get_session_settings()
    response.set_cookie(
        settings.cookie_name,
        token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    if remember_me:
        response.set_cookie(
            settings.remember_me_cookie_name,
            token,
            max_age=remember_me_max_age_seconds
            or int(settings.remember_me_max_age.total_seconds()),
            httponly=True,
            secure=settings.cookie_secure,
            samesite="lax",
        )


def clear_session_cookies(response: Response) -> None:
    settings = get_session_settings()
    response.delete_cookie(settings.cookie_name, httponly=True, samesite="lax")
    response.delete_cookie(
        settings.remember_me_cookie_name, httponly=True, samesite="lax"
    )


def clear_remember_me_header() -> dict[str, str]:
    """Set-Cookie header expiring the remember-me cookie.

    For responses raised as HTTPException, which carry headers but not
    cookies.
    """
    name = get_session_settings().remember_me_cookie_name
    return {"set-cookie": f'{name}=""; Max-Age=0; Path=/; HttpOnly; SameSite=lax'}

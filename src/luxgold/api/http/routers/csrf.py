"""CSRF token issuance."""

from fastapi import APIRouter, Response

from src.luxgold.core.security import generate_csrf_token, set_csrf_cookie

router = APIRouter(prefix="/csrf", tags=["security"])


@router.get("")
async def issue_csrf_token(response: Response) -> dict[str, str]:
    """Issue a fresh token and set its signed cookie.

    Clients call this before making state-changing requests and send the
    returned token back in the ``X-CSRF-Token`` header.
    """
    token = generate_csrf_token()
    set_csrf_cookie(response, token)
    return {
        "token": token,
        "usage": "Include this token in X-CSRF-Token header for POST/PUT/PATCH/DELETE requests",
    }

from fastapi import APIRouter, Response, status

from todosync.api.utils.jwt import generate_csrf_token

router = APIRouter(tags=["CSRF"])

CSRF_COOKIE = "XSRF-TOKEN"


@router.get("/sanctum/csrf-cookie", status_code=status.HTTP_204_NO_CONTENT)
async def csrf_cookie(response: Response):
    """
    Anti-forgery handshake.

    Issues a signed token both as the XSRF-TOKEN cookie (for browsers) and
    the X-XSRF-TOKEN response header (for non-browser clients). Callers echo
    it back in the X-XSRF-TOKEN request header on state-changing requests.
    """
    token = generate_csrf_token()
    response.set_cookie(CSRF_COOKIE, token, httponly=False, samesite="lax")
    response.headers["X-XSRF-TOKEN"] = token
    response.status_code = status.HTTP_204_NO_CONTENT
    return response

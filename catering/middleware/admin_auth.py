from urllib.parse import quote

from fastapi import HTTPException, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse

from catering import config
from catering.utils.tokens import decode_token

LOGIN_PATH = "/admin/login"


def current_admin(request: Request):
    return decode_token(request.cookies.get(config.ADMIN_COOKIE))


class AdminAuthMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        # only /admin pages, the login page stays open
        path = request.url.path
        if path.startswith("/admin") and path != LOGIN_PATH:
            if not current_admin(request):
                return RedirectResponse(f"{LOGIN_PATH}?next={quote(path)}", status_code=303)
        return await call_next(request)


# Dependency for the JSON API
def require_admin(request: Request) -> str:
    username = current_admin(request)
    if not username:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return username

# catering/routers/auth.py: admin login / logout
import logging
import time

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse

from catering import config
from catering.schemas import LoginIn
from catering.templating import templates
from catering.utils.tokens import check_credentials, create_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["auth"])

# ---------- rate limit ----------
MAX_ATTEMPTS = 5
BLOCK_TIME = 60           # seconds
login_attempts = {}       # {"ip": {"count": int, "last": timestamp}}


def check_rate_limit(ip: str) -> bool:
    data = login_attempts.get(ip)
    if not data:
        return True
    return not (data["count"] >= MAX_ATTEMPTS and time.time() - data["last"] < BLOCK_TIME)


def prune_attempts(now: float):
    # entries older than BLOCK_TIME no longer limit anyone
    for ip in [ip for ip, data in login_attempts.items() if now - data["last"] > BLOCK_TIME]:
        del login_attempts[ip]


def add_attempt(ip: str):
    now = time.time()
    prune_attempts(now)
    data = login_attempts.get(ip)
    if not data or now - data["last"] > BLOCK_TIME:
        login_attempts[ip] = {"count": 1, "last": now}
    else:
        data["count"] += 1
        data["last"] = now


def reset_attempts(ip: str):
    login_attempts.pop(ip, None)


# ---------- routes ----------
@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, next: str = Query("/admin/print")):
    # local paths only
    next_url = next if next.startswith("/") and not next.startswith("//") else "/admin/print"
    return templates.TemplateResponse(request, "auth/login.html", {"next_url": next_url})


@router.post("/login")
def login(payload: LoginIn, request: Request):
    if not config.ADMIN_USER or not config.ADMIN_PASS:
        raise HTTPException(status_code=500, detail="Admin credentials not configured")

    ip = request.client.host if request.client else "unknown"
    if not check_rate_limit(ip):
        raise HTTPException(status_code=429, detail="Too many attempts, try again in a minute")

    if not check_credentials(payload.username, payload.password):
        add_attempt(ip)
        logger.warning("Failed admin login for %r from %s", payload.username, ip)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    reset_attempts(ip)
    response = JSONResponse({"success": True})
    response.set_cookie(
        config.ADMIN_COOKIE,
        create_token(payload.username),
        max_age=config.JWT_EXPIRE_MIN * 60,
        path="/",
        httponly=True,
        samesite="lax",
        secure=config.ENV == "production",
    )
    logger.info("Admin %s logged in", payload.username)
    return response


@router.post("/logout")
def logout():
    response = JSONResponse({"success": True})
    response.delete_cookie(config.ADMIN_COOKIE, path="/")
    return response

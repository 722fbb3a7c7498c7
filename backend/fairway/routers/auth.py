import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt
from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from ..exceptions import http_problem
from ..passwords import pwd_context
from ..schemas import LoginRequest, SessionOut, SignupRequest, TokenOut, UserOut
from ..store import QueryClient, Row, StoreError, get_store

logger = logging.getLogger(__name__)


def get_jwt_secret() -> str:
  secret = os.getenv("JWT_SECRET")
  if not secret:
    raise RuntimeError("JWT_SECRET environment variable is required")
  if len(secret) < 32 or secret.lower() in {"secret", "changeme", "default"}:
    raise RuntimeError(
        "JWT_SECRET must be at least 32 characters and not a common default"
    )
  return secret


JWT_ALG = "HS256"
JWT_EXPIRE_SECONDS = 3600


def _rate_limits_disabled() -> bool:
  return (os.getenv("DISABLE_AUTH_RATE_LIMITS") or "").lower() == "true"


def _get_client_ip(request: Request) -> str:
  forwarded = request.headers.get("X-Forwarded-For")
  if forwarded:
    parts = [ip.strip() for ip in forwarded.split(",") if ip.strip()]
    if parts:
      return parts[-1]
  real_ip = request.headers.get("X-Real-IP")
  if real_ip:
    return real_ip
  return request.client.host if request.client else ""


limiter = Limiter(key_func=_get_client_ip)
router = APIRouter(prefix="/auth", tags=["auth"])


def signup_rate_limit() -> str:
  if _rate_limits_disabled():
    return "1000/second"
  return "5/minute"


def login_rate_limit() -> str:
  if _rate_limits_disabled():
    return "1000/second"
  return "5/minute"


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
  detail = exc.detail if isinstance(exc.detail, str) else ""
  if detail:
    message = f"rate limit exceeded: {detail}"
  else:
    message = "rate limit exceeded: please wait before submitting another request."
  return JSONResponse(
      status_code=429,
      content={
          "detail": message,
          "code": "rate_limit_exceeded",
      },
  )


def _utcnow() -> datetime:
  """Return a timezone-aware UTC ``datetime``."""
  return datetime.now(timezone.utc)


def create_token(user: Row) -> str:
  now = _utcnow()
  payload = {
      "sub": user["id"],
      "email": user["email"],
      "iat": now,
      "exp": now + timedelta(seconds=JWT_EXPIRE_SECONDS),
  }
  return jwt.encode(payload, get_jwt_secret(), algorithm=JWT_ALG)


def _user_out(user: Row) -> UserOut:
  return UserOut(id=user["id"], email=user["email"], full_name=user.get("full_name"))


def _extract_bearer_token(authorization: str | None) -> str:
  if authorization and authorization.lower().startswith("bearer "):
    return authorization.split(" ", 1)[1].strip()
  raise http_problem(
      status_code=401,
      detail="missing token",
      code="auth_missing_token",
  )


def _decode_token(token: str) -> dict[str, Any]:
  try:
    return jwt.decode(token, get_jwt_secret(), algorithms=[JWT_ALG])
  except jwt.ExpiredSignatureError:
    raise http_problem(
        status_code=401,
        detail="token expired",
        code="auth_token_expired",
    )
  except jwt.PyJWTError:
    raise http_problem(
        status_code=401,
        detail="invalid token",
        code="auth_invalid_token",
    )


async def _resolve_user_and_payload(
    authorization: str | None, client: QueryClient
) -> tuple[Row, dict[str, Any]]:
  payload = _decode_token(_extract_bearer_token(authorization))
  user = await client.first("users", {"id": payload.get("sub")})
  if not user:
    raise http_problem(
        status_code=401,
        detail="user not found",
        code="auth_user_not_found",
    )
  return user, payload


async def resolve_user(
    authorization: str | None, client: QueryClient
) -> Optional[Row]:
  """Return the bearer token's user, or ``None`` when no token was sent."""
  if not authorization:
    return None
  user, _ = await _resolve_user_and_payload(authorization, client)
  return user


@router.post("/signup", response_model=TokenOut)
@limiter.limit(signup_rate_limit)
async def signup(
    request: Request,
    body: SignupRequest,
    client: QueryClient = Depends(get_store),
):
  existing = await client.first("users", {"email": body.email}, columns=["id"])
  if existing:
    raise http_problem(
        status_code=400,
        detail="email exists",
        code="auth_email_exists",
    )
  try:
    rows = await client.insert(
        "users",
        [
            {
                "email": body.email,
                "full_name": body.full_name,
                "password_hash": pwd_context.hash(body.password),
            }
        ],
    )
  except StoreError:
    # Lost a race with a concurrent signup for the same address.
    raise http_problem(
        status_code=400,
        detail="email exists",
        code="auth_email_exists",
    )
  user = rows[0]
  logger.info("Created owner account %s", user["id"])
  return TokenOut(access_token=create_token(user), expires_in=JWT_EXPIRE_SECONDS)


@router.post("/login", response_model=TokenOut)
@limiter.limit(login_rate_limit)
async def login(
    request: Request,
    body: LoginRequest,
    client: QueryClient = Depends(get_store),
):
  user = await client.first("users", {"email": body.email})
  if not user or not pwd_context.verify(body.password, user["password_hash"]):
    raise http_problem(
        status_code=401,
        detail="invalid credentials",
        code="auth_invalid_credentials",
    )
  return TokenOut(access_token=create_token(user), expires_in=JWT_EXPIRE_SECONDS)


async def get_current_user(
    authorization: str | None = Header(None),
    client: QueryClient = Depends(get_store),
) -> Row:
  user, _ = await _resolve_user_and_payload(authorization, client)
  return user


@router.get("/session", response_model=SessionOut)
async def read_session(
    authorization: str | None = Header(None),
    client: QueryClient = Depends(get_store),
):
  user, payload = await _resolve_user_and_payload(authorization, client)
  return SessionOut(
      user=_user_out(user),
      expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
  )

from pydantic import BaseModel
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from .models import UserView
from .errors import ApiError, SessionExpiredError
import httpx
import logging

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15

class Session(BaseModel):
    """
    Credentials of a logged-in user.

    The session is an explicit value handed to the API client; nothing is cached globally.
    """
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserView

    @classmethod
    def from_token_response(cls, data: Dict[str, Any], now: Optional[datetime] = None) -> "Session":
        now = now or datetime.now(timezone.utc)
        return cls(
            access_token=data["access_token"],
            refresh_token=data["refresh_token"],
            token_type=data.get("token_type", "bearer"),
            expires_at=now + timedelta(seconds=int(data["expires_in"])),
            user=UserView(**data["user"]),
        )

    def is_expired(self, now: Optional[datetime] = None, leeway_seconds: int = 30) -> bool:
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at - timedelta(seconds=leeway_seconds)

    @property
    def authorization_header(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}

class AuthClient:
    """Talks to the /auth routes: register, login, refresh and logout"""

    def __init__(self, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.transport = transport
        self.timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, transport=self.transport, timeout=self.timeout)

    async def _post_for_session(self, path: str, payload: Dict[str, Any], fallback: str) -> Session:
        async with self._client() as client:
            response = await client.post(path, json=payload)
        if response.status_code not in (200, 201):
            raise ApiError.from_response(response, fallback)
        return Session.from_token_response(response.json())

    async def register(self, name: str, email: str, password: str, timezone_name: str = "UTC") -> Session:
        return await self._post_for_session(
            "/auth/register",
            {"name": name, "email": email, "password": password, "timezone": timezone_name},
            "Registration failed",
        )

    async def login(self, email: str, password: str) -> Session:
        return await self._post_for_session("/auth/login", {"email": email, "password": password}, "Login failed")

    async def refresh(self, session: Session) -> Session:
        """Exchange the session's refresh token for a new session"""
        async with self._client() as client:
            response = await client.post("/auth/refresh", json={"refresh_token": session.refresh_token})
        if response.status_code != 200:
            logger.info(f"Session refresh rejected with {response.status_code}")
            raise SessionExpiredError.from_response(response, "Session expired, please log in again")
        return Session.from_token_response(response.json())

    async def logout(self, session: Session) -> None:
        async with self._client() as client:
            response = await client.post("/auth/logout", headers=session.authorization_header)
        if response.status_code != 200:
            raise ApiError.from_response(response, "Logout failed")

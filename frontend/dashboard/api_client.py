from typing import Optional, Dict, Any, List
from .models import HabitView, habit_from_payload
from .session import Session, AuthClient, DEFAULT_TIMEOUT
from .errors import ApiError
import httpx
import logging

logger = logging.getLogger(__name__)

class HabitApiClient:
    """
    Async client for the /habits routes.

    Every call carries the credentials of the Session it was built with. An expired session is
    refreshed through the AuthClient before the call, and a call rejected as unauthenticated is
    retried once after a refresh. The current session is always available as `self.session`.
    """

    def __init__(
        self,
        base_url: str,
        session: Session,
        auth_client: AuthClient,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = DEFAULT_TIMEOUT
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.auth_client = auth_client
        self.transport = transport
        self.timeout = timeout

    async def _refresh_session(self) -> None:
        self.session = await self.auth_client.refresh(self.session)
        logger.info(f"Refreshed session for user {self.session.user.id}")

    async def _send(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> httpx.Response:
        async with httpx.AsyncClient(base_url=self.base_url, transport=self.transport, timeout=self.timeout) as client:
            return await client.request(method, path, json=json, headers=self.session.authorization_header)

    async def _request(self, method: str, path: str, fallback: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if self.session.is_expired():
            await self._refresh_session()

        response = await self._send(method, path, json)

        # Only bearer challenges mean the credential itself was rejected;
        # ownership errors can share the status code but carry no challenge
        if response.status_code == 401 and "bearer" in response.headers.get("www-authenticate", "").lower():
            await self._refresh_session()
            response = await self._send(method, path, json)

        if response.status_code >= 400:
            raise ApiError.from_response(response, fallback)
        return response.json()

    async def list_habits(self) -> List[HabitView]:
        body = await self._request("GET", "/habits", "Failed to fetch habits")
        return [habit_from_payload(item) for item in body.get("data", [])]

    async def get_habit(self, habit_id: str) -> HabitView:
        body = await self._request("GET", f"/habits/{habit_id}", "Failed to fetch habit")
        return habit_from_payload(body["data"])

    async def create_habit(self, fields: Dict[str, Any]) -> HabitView:
        body = await self._request("POST", "/habits", "Failed to create habit", json=fields)
        return habit_from_payload(body["data"])

    async def update_habit(self, habit_id: str, fields: Dict[str, Any]) -> HabitView:
        body = await self._request("PUT", f"/habits/{habit_id}", "Failed to update habit", json=fields)
        return habit_from_payload(body["data"])

    async def delete_habit(self, habit_id: str) -> None:
        await self._request("DELETE", f"/habits/{habit_id}", "Failed to delete habit")

    async def toggle_completion(self, habit_id: str) -> HabitView:
        body = await self._request("PUT", f"/habits/{habit_id}/complete", "Failed to update habit completion")
        return habit_from_payload(body["data"])

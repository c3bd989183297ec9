from typing import Optional
import httpx

class ApiError(Exception):
    """Error surfaced from the habit API, carrying the server's message"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @classmethod
    def from_response(cls, response: httpx.Response, fallback: str) -> "ApiError":
        try:
            body = response.json()
        except ValueError:
            body = None
        message = body.get("message") if isinstance(body, dict) else None
        message = message or fallback
        return cls(message, response.status_code)

class SessionExpiredError(ApiError):
    """The refresh token was rejected; the user has to log in again"""

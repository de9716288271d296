"""Response Cookie Store — CookieStore capability over a FastAPI request/response pair.

Invariants:
    - get() reflects cookies staged earlier in the same request (set/delete)
    - Session cookies are HttpOnly, SameSite=strict, Path=/
    - delete() always stages a Set-Cookie expiry, even if the request had no cookie

Design Decisions:
    - Explicit adapter over ambient request state: Session Manager receives it
      as an argument and tests substitute a plain in-memory fake
"""

from fastapi import Request, Response

_DELETED = object()


class ResponseCookieStore:
    """Reads from the incoming request, stages writes on the outgoing response."""

    def __init__(self, request: Request, response: Response, *, secure: bool = False):
        self.request = request
        self.response = response
        self.secure = secure
        self._staged: dict[str, object] = {}

    def get(self, name: str) -> str | None:
        staged = self._staged.get(name)
        if staged is _DELETED:
            return None
        if staged is not None:
            return staged  # type: ignore[return-value]
        return self.request.cookies.get(name)

    def set(self, name: str, value: str, *, max_age: int) -> None:
        self.response.set_cookie(
            name, value,
            max_age=max_age,
            path="/",
            httponly=True,
            secure=self.secure,
            samesite="strict",
        )
        self._staged[name] = value

    def delete(self, name: str) -> None:
        self.response.delete_cookie(
            name, path="/", httponly=True, secure=self.secure, samesite="strict",
        )
        self._staged[name] = _DELETED

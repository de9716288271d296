"""Auth Schemas — Pydantic models for the administrator login/logout boundary.

Invariants:
    - LoginRequest.username: 1-255 chars, stripped, non-empty
    - LoginRequest.password: 1-72 chars (bcrypt's input limit is enforced again
      in bytes by the credential verifier)
    - Responses never carry tokens; the token travels only in the cookie

Design Decisions:
    - "email" accepted as an alias of username: the admin login form posts
      the address in an email field
"""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field, field_validator


class LoginRequest(BaseModel):
    """Administrator credentials."""
    username: str = Field(
        min_length=1, max_length=255,
        validation_alias=AliasChoices("username", "email"),
    )
    password: str = Field(min_length=1, max_length=72)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("username cannot be empty or whitespace")
        return v


class AuthResult(BaseModel):
    """Login/logout outcome with the page the client should navigate to."""
    ok: bool = True
    url: str


class SessionInfo(BaseModel):
    """Public view of the caller's active administrator session."""
    subject_id: str
    issued_at: datetime
    expires_at: datetime

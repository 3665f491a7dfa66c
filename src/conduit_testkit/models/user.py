"""User models for login, registration and the authenticated session."""

from __future__ import annotations

from pydantic import BaseModel


class UserCredentials(BaseModel):
    """Email and password, as sent to the login endpoint."""

    email: str
    password: str


class UserRegistration(UserCredentials):
    """Registration payload: credentials plus username."""

    username: str
    bio: str | None = None
    image: str | None = None

    def credentials(self) -> UserCredentials:
        return UserCredentials(email=self.email, password=self.password)


class AuthenticatedUser(BaseModel):
    """User returned by login/registration, carrying the API token."""

    email: str
    token: str
    username: str
    bio: str | None = None
    image: str | None = None

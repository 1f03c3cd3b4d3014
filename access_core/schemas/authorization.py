"""Authorization check schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class AuthorizationRequest(BaseModel):
    permission: Optional[str] = Field(default=None, max_length=120)
    roles: Optional[List[str]] = None
    # With roles: every listed role must be held instead of any one of them.
    require_all: bool = False

    @model_validator(mode="after")
    def exactly_one_target(self) -> "AuthorizationRequest":
        if (self.permission is None) == (self.roles is None):
            raise ValueError("Provide exactly one of permission or roles")
        return self


class AuthorizationResponse(BaseModel):
    authorized: bool
    reason: Optional[str] = None

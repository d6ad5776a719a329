"""Structured outcomes of identity and account operations.

Operations in `cupi.identity` never raise past their boundary; they return
one of these models and the HTTP layer maps `error` to a status code.
"""

from __future__ import annotations
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

AccountErrorCode = Literal[
    "unauthenticated",
    "invalid_input",
    "persistence_failure",
    "not_found",
    "forbidden",
]


class AccountResult(BaseModel):
    success: bool = Field(description="Whether the operation succeeded")
    error: Optional[AccountErrorCode] = Field(
        default=None, description="Failure category if unsuccessful"
    )
    message: Optional[str] = Field(
        default=None, description="Human-readable status message"
    )

    @classmethod
    def failure(cls, error: AccountErrorCode, message: str):
        return cls(success=False, error=error, message=message)


class RegistrationResult(AccountResult):
    user_id: Optional[UUID] = None
    newly_onboarded: bool = Field(
        default=False,
        description="True when this call moved the user into the onboarded state",
    )


class WorkspaceResult(AccountResult):
    workspace_id: Optional[UUID] = None

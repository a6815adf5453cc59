from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class GenerateRequest(BaseModel):
    first_name: str
    last_name: str
    # Omitted bounds fall back to the configured defaults
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    existing_usernames: List[str] = []


class GenerateResponse(BaseModel):
    username: str


class SignupRequest(BaseModel):
    first_name: str
    last_name: str


class SignupResponse(BaseModel):
    user_id: str
    role: str = "member"

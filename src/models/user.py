"""
User-related Pydantic models
"""

from typing import Optional
from pydantic import BaseModel


class User(BaseModel):
    id: int
    # Columns are nullable; rows written outside this service may hold NULL
    name: Optional[str] = None
    email: Optional[str] = None


class UserCreateRequest(BaseModel):
    """Body of POST /users. Missing fields default to empty strings; extra keys such as id are ignored."""
    name: str = ""
    email: str = ""


class UserUpdateRequest(BaseModel):
    """Body of PUT /users/{id}. The id always comes from the path."""
    name: str = ""
    email: str = ""


class MessageResponse(BaseModel):
    message: str

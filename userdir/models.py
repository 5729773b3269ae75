"""
Pydantic models for the userdir application
"""

from enum import Enum
from pydantic import BaseModel
from typing import List, Optional


class User(BaseModel):
    """Model for a single directory user"""
    id: int
    email: str
    first_name: str
    last_name: str
    avatar: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class PagedUsers(BaseModel):
    """Model for one page of the user directory"""
    page: int
    per_page: int
    total: int
    total_pages: int
    data: List[User]


class UserResponse(BaseModel):
    """Envelope returned by the directory for a single user"""
    data: User


class LoadingStatus(BaseModel):
    """Model for the global loading indicator"""
    is_loading: bool
    active_requests: int


class SearchPhase(str, Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    SEARCHING = "searching"
    FOUND = "found"
    ERROR = "error"


class SearchState(BaseModel):
    """Snapshot of a search field"""
    raw_input: str
    is_valid: bool
    phase: SearchPhase
    result: Optional[User] = None
    error_message: Optional[str] = None
    sequence: int


class ErrorResponse(BaseModel):
    """Model for error responses"""
    detail: str
    error_type: str

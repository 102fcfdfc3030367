from enum import Enum
from typing import Any

from pydantic import BaseModel


class ErrorCategory(str, Enum):
    VALIDATION_ERROR = "validation-error"
    TRAVERSAL_DETECTED = "traversal-detected"
    NOT_FOUND = "not-found"
    IS_DIRECTORY = "is-directory"
    INTERNAL_ERROR = "internal-error"


class RejectionReason(str, Enum):
    INVALID_INPUT = "invalid-input"
    TRAVERSAL_DETECTED = "traversal-detected"


class LabName(str, Enum):
    CANONICALIZATION = "canonicalization"
    AUTH = "auth"
    ACCESS_CONTROL = "access-control"


class ReadRequest(BaseModel):
    # Left untyped so shape checks happen in validate_filename, not in pydantic
    filename: Any = None


class ReadResult(BaseModel):
    path: str
    content: str


class ErrorResponse(BaseModel):
    error: ErrorCategory
    message: str


class SetupResult(BaseModel):
    ok: bool
    base: str


class HealthResponse(BaseModel):
    status: str
    version: str


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class LoginResult(BaseModel):
    success: bool
    token: str | None = None
    message: str | None = None


class MeResponse(BaseModel):
    authenticated: bool
    username: str | None = None


class LabUser(BaseModel):
    id: int
    name: str
    role: str
    department: str


class Order(BaseModel):
    id: int
    user_id: int
    item: str
    region: str
    total: int

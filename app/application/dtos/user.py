"""DTOs for user use cases (no dependency on ORM)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserResult:
    """User read-model. No password."""

    id: str
    email: str
    name: str
    role: str
    is_active: bool

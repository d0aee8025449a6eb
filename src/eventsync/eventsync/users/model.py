from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Account as known to the identity provider."""

    user_id: int
    name: str
    email: str
    role: Role

from pydantic import BaseModel
from typing import Optional


class Actor(BaseModel):
    """Identity attached to a request by the upstream auth provider."""
    id: str
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class TokenData(BaseModel):
    sub: Optional[str] = None
    role: Optional[str] = None

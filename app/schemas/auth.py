from __future__ import annotations

from pydantic import BaseModel


class CurrentUser(BaseModel):
    id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

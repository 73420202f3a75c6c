from __future__ import annotations

from typing import Callable, Iterable

from fastapi import Depends, Header, HTTPException, status

from app.schemas.auth import CurrentUser


def get_current_user(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> CurrentUser:
    """Principal forwarded by the authenticating gateway."""

    if not x_user_id or not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized to access this route",
        )
    return CurrentUser(id=x_user_id.strip(), role=x_user_role.strip().lower())


def require_roles(roles: Iterable[str]) -> Callable[..., CurrentUser]:
    allowed = frozenset(roles)

    def _dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"User role {user.role} is not authorized to access this route",
            )
        return user

    return _dependency

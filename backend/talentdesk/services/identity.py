"""
Acting recruiter, as forwarded by the identity provider in front of the API.

Sign-in happens upstream; requests reach us with the verified user in
``X-User-*`` headers.
"""
from dataclasses import dataclass
from typing import Optional
from fastapi import Header, HTTPException, status


@dataclass
class Recruiter:
    id: str
    name: str = ""
    email: str = ""
    role: str = "recruiter"

    @property
    def display_name(self) -> str:
        return self.name.strip() or self.email or self.id


async def get_current_recruiter(
    x_user_id: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
    x_user_email: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Recruiter:
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing user identity",
        )
    return Recruiter(
        id=x_user_id,
        name=x_user_name or "",
        email=x_user_email or "",
        role=x_user_role or "recruiter",
    )

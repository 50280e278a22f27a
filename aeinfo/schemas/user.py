from pydantic import BaseModel
from typing import Optional


class CurrentUser(BaseModel):
    email: str
    is_admin: bool = False


class TokenData(BaseModel):
    email: Optional[str] = None
    role: Optional[str] = None

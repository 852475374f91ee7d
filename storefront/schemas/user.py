from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


# The single live identity of the client process
class User(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    balance: float = 0.0
    referrals: int = 0
    referral_link: str = ""
    is_admin: bool = False


# Identity supplied by the host environment before the authority is consulted
class HostIdentity(BaseModel):
    id: int
    username: Optional[str] = None
    first_name: Optional[str] = None


# Schema for get-or-create user requests
class UserCreate(BaseModel):
    telegram_id: int
    username: str = Field(min_length=1)
    is_admin: bool = False


# Output schema for user profile details
class UserResponse(BaseModel):
    id: int
    telegram_id: int
    username: str
    balance: float
    referrals: int
    is_admin: bool

    class Config:
        from_attributes = True

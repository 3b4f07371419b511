from typing import Literal, Optional

from pydantic import BaseModel, Field

Role = Literal["admin", "teacher", "student", "parent"]


class UserBase(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    full_name: Optional[str] = Field(default=None, max_length=120)
    role: Role


class UserCreate(UserBase):
    pass


class UserUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, max_length=120)
    role: Optional[Role] = None


class UserOut(UserBase):
    id: int

    class Config:
        from_attributes = True

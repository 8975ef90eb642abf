from pydantic import BaseModel, Field
from typing import Optional


class UserLogin(BaseModel):
    email: str
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str


class TeacherCreate(BaseModel):
    email: str
    password: str = Field(min_length=6)
    full_name: str
    employee_id: Optional[str] = None


class TeacherUpdate(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=6)
    full_name: Optional[str] = Field(default=None, min_length=1)
    employee_id: Optional[str] = None


class AdminCreate(BaseModel):
    email: str
    password: str = Field(min_length=6)
    full_name: str


class AdminUpdate(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=6)
    full_name: Optional[str] = Field(default=None, min_length=1)


class UserOut(BaseModel):
    id: int
    email: str
    full_name: str
    role: str
    employee_id: Optional[str] = None

    class Config:
        from_attributes = True

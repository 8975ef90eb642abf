from pydantic import BaseModel, Field
from typing import List, Optional


class ProgramCreate(BaseModel):
    name: str = Field(min_length=1)


class ProgramUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)


class ProgramOut(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class RoomCreate(BaseModel):
    name: str = Field(min_length=1)


class RoomUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)


class RoomOut(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class CourseCreate(BaseModel):
    title: str = Field(min_length=1)
    program_ids: List[int] = []


class CourseUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    program_ids: Optional[List[int]] = None


class CourseOut(BaseModel):
    id: int
    title: str
    program_ids: List[int] = []

    class Config:
        from_attributes = True


class StudentCreate(BaseModel):
    matricule: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    tag_id: str = Field(min_length=1)
    photo_url: Optional[str] = None
    program_id: int


class StudentUpdate(BaseModel):
    matricule: Optional[str] = Field(default=None, min_length=1)
    full_name: Optional[str] = Field(default=None, min_length=1)
    tag_id: Optional[str] = Field(default=None, min_length=1)
    photo_url: Optional[str] = None
    program_id: Optional[int] = None


class StudentOut(BaseModel):
    id: int
    matricule: str
    full_name: str
    tag_id: str
    photo_url: Optional[str] = None
    program_id: int

    class Config:
        from_attributes = True


class StudentSummary(BaseModel):
    id: int
    matricule: str
    full_name: str
    photo_url: Optional[str] = None

    class Config:
        from_attributes = True


class TeacherSummary(BaseModel):
    id: int
    full_name: str
    employee_id: Optional[str] = None

    class Config:
        from_attributes = True

from sqlalchemy import Column, Integer, String, Enum
from classroll.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(Enum("admin", "teacher", name="user_role"), nullable=False)
    full_name = Column(String, nullable=False)
    employee_id = Column(String, unique=True, nullable=True)

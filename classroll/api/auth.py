from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from classroll.api.deps import get_db, get_current_user
from classroll.core.security import verify_password, create_access_token
from classroll.crud import user as crud_user
from classroll.db.models.user import User
from classroll.schemas.user import UserLogin, Token, UserOut

router = APIRouter()


@router.post("/login", response_model=Token)
def login(form: UserLogin, db: Session = Depends(get_db)):
    user = crud_user.get_user_by_email(db, form.email.strip().lower())
    if not user or not verify_password(form.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    access_token = create_access_token(data={"sub": user.email, "role": user.role})
    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/me", response_model=UserOut)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user

# app/auth/api.py
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.shared.db import get_db
from app.shared.auth import get_sessions
from app.shared.sessions import SessionRegistry
from app.auth.service import create_user, hash_password, verify_credentials

router = APIRouter(prefix="/api", tags=["Auth"])

class CredentialsIn(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1)

@router.post("/register", status_code=201)
def api_register(inb: CredentialsIn, db: Session = Depends(get_db)):
    create_user(db, inb.username, hash_password(inb.password))
    return {"status": "created"}

@router.post("/login")
def api_login(
    inb: CredentialsIn,
    db: Session = Depends(get_db),
    sessions: SessionRegistry = Depends(get_sessions),
):
    user_id = verify_credentials(db, inb.username, inb.password)
    return {"token": sessions.create_session(user_id)}

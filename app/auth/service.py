import logging
from pathlib import Path
from secrets import compare_digest

import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.auth.models import User
from app.shared.config import settings
from app.shared.errors import (
    DuplicateUsername,
    InvalidCredentials,
    InvalidUsername,
    StorageFailure,
)

logger = logging.getLogger(__name__)

def hash_password(pw: str) -> str:
    return bcrypt.hashpw(pw.encode(), bcrypt.gensalt()).decode()

def _legacy_hex(pw: str) -> str:
    # hashes written by the old Go server: hex of the raw password bytes
    return pw.encode().hex()

def _verify(pw: str, ph: str) -> bool:
    if ph.startswith("$2"):
        try: return bcrypt.checkpw(pw.encode(), ph.encode())
        except ValueError: return False
    return compare_digest(_legacy_hex(pw), ph)

def user_id_for(username: str) -> str:
    return f"user_{username}"

def _check_username(username: str) -> None:
    if (
        not username
        or username in (".", "..")
        or "/" in username
        or "\\" in username
        or "\x00" in username
    ):
        raise InvalidUsername("invalid username")

def create_user(db: Session, username: str, password_hash: str) -> User:
    _check_username(username)
    home = Path(settings.FILES_ROOT).resolve() / username
    try:
        home.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageFailure(f"could not create home directory: {e}") from e

    u = User(id=user_id_for(username), username=username, password_hash=password_hash, home_dir=str(home))
    db.add(u)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateUsername(f"username already exists: {username}") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageFailure(f"could not store user: {e}") from e
    db.refresh(u)
    logger.info("registered %s (home %s)", u.id, u.home_dir)
    return u

def verify_credentials(db: Session, username: str, password: str) -> str:
    u = db.scalars(select(User).where(User.username == username)).first()
    if not u or not _verify(password, u.password_hash):
        logger.info("login failed for %r", username)
        raise InvalidCredentials("invalid credentials")
    return u.id

def get_home_dir(db: Session, user_id: str) -> Path:
    home = db.scalars(select(User.home_dir).where(User.id == user_id)).first()
    if home is None:
        raise StorageFailure(f"no such user: {user_id}")
    return Path(home)

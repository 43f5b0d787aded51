from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from app.shared.config import settings

# Local SQLite DB under DATA_DIR (created if missing)
Path(settings.DATA_DIR).mkdir(parents=True, exist_ok=True)

engine = create_engine(
    settings.DB_URL,
    echo=settings.DEBUG_SQL,
    connect_args={"check_same_thread": False} if settings.DB_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

class Base(DeclarativeBase):
    pass

# FastAPI dep
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db(bind=None):
    # import models so they register with Base.metadata
    from app.auth import models as auth_models  # noqa: F401
    from app.files import models as files_models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)

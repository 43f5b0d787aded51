from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text
from app.shared.db import Base

class User(Base):
    __tablename__ = "users"
    id: Mapped[str] = mapped_column(String(80), primary_key=True)  # "user_<username>"
    username: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    home_dir: Mapped[str] = mapped_column(Text)

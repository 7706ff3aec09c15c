from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.sql import func

from placecell.db.postgres import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    display_name = Column(String(200), unique=True, nullable=False)
    phone = Column(String(50), nullable=True)
    role = Column(String(20), nullable=False, default="coordinator")  # admin, coordinator
    status = Column(String(20), nullable=False, default="pending")  # pending, approved, rejected
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

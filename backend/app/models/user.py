# app/models/user.py
from sqlalchemy import Boolean, Column, DateTime, Integer, String, func, true

from app.core.base import Base


class User(Base):
    """Profile + credential row. Each tenant database holds its own ``users`` table."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)

    # Stored lower-cased; lookups normalize the same way.
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    phone = Column(String(40), nullable=True)
    # External candidate identifier shared with the candidate tables.
    candidate_id = Column(String(64), nullable=True, index=True)

    is_active = Column(Boolean, nullable=False, server_default=true())

    last_login_at = Column(DateTime(timezone=True), nullable=True)
    password_changed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

"""User model."""

from sqlalchemy import CheckConstraint, Column, Integer, String
from sqlalchemy.orm import relationship

from src.database import Base
from src.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """Registered author. Email is stored lowercased."""

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("posts >= 0", name="ck_users_posts_non_negative"),)

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    avatar = Column(String(500), nullable=True)  # generated blob filename
    posts = Column(Integer, nullable=False, default=0, server_default="0")

    # Relationships
    authored_posts = relationship("Post", back_populates="creator")

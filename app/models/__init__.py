"""SQLAlchemy database models."""
from dotenv import load_dotenv

from app.models.base import Base
from app.models.blog import BlogPost
from app.models.user import User, UserRole

load_dotenv()

__all__ = [
    "Base",
    "User",
    "UserRole",
    "BlogPost",
]

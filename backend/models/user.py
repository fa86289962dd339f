from sqlalchemy import Column, String, DateTime, Boolean
from database.db import Base
from datetime import datetime
import uuid

class User(Base):
    """
    User model for interview participants and administrators.
    """
    __tablename__ = "users"

    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    """Unique user ID (UUID)"""

    # User credentials
    email = Column(String(100), unique=True, nullable=False, index=True)
    """User email address, used for login"""

    hashed_password = Column(String(255), nullable=False)
    """Hashed password (using bcrypt)"""

    # User information
    full_name = Column(String(100), nullable=True)
    """User's full name"""

    # Account status
    is_active = Column(Boolean, default=True)
    """Whether the user account is active"""

    role = Column(String(20), default="user")
    """User role: 'user' for candidates, 'admin' for administrator"""

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    """Account creation timestamp"""

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    """Last account update timestamp"""

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

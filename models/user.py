from models.base_model import Base, BaseModel
from sqlalchemy import Boolean, Column, DateTime, Integer, String


class User(BaseModel, Base):
    """
    Identity record plus the login lockout state.

    Invariants kept by utils.lockout:
      is_locked implies locked_time is set and login_attempts >= the lockout threshold;
      locked_time is None whenever is_locked is False.
    """
    __tablename__ = "users"

    username = Column(String(150), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default="user")

    login_attempts = Column(Integer, nullable=False, default=0)
    is_locked = Column(Boolean, nullable=False, default=False)
    # naive UTC
    locked_time = Column(DateTime, nullable=True)

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("role", "user")
        kwargs.setdefault("login_attempts", 0)
        kwargs.setdefault("is_locked", False)
        kwargs.setdefault("locked_time", None)
        super().__init__(*args, **kwargs)

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    def __repr__(self):
        return f"<User username={self.username} role={self.role}>"

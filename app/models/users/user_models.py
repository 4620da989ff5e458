from sqlalchemy import Column, Integer, String, Boolean, DateTime
from app.core.db import Base
from app.models.base.mixins import TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    phone = Column(String(20), nullable=True)
    role = Column(String(30), nullable=False, default="cashier")
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime(timezone=True))

    def __repr__(self):
        return f"<User id={self.id} username={self.username} role={self.role}>"

import re
from sqlalchemy import (
    Column, Integer, String, ForeignKey, TIMESTAMP, Text, Index, UniqueConstraint
)
from sqlalchemy.sql import func
from sqlalchemy.orm import validates, relationship

from picwall.database.dbbase import Base, utcnow
from picwall.utils.jwt import hash_password, verify_password

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


# =============================
# Users
# =============================
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)

    # OAuth-only accounts have no password
    password_hash = Column(Text, nullable=True)

    image = Column(Text, nullable=True)
    image_key = Column(Text, nullable=True)

    # NULL is allowed many times, so the constraint only binds real usernames
    username = Column(String(50), nullable=True, unique=True)
    bio = Column(Text, nullable=False, default="")
    email_verified = Column(TIMESTAMP, nullable=True)

    created_at = Column(TIMESTAMP, default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP, default=utcnow, server_default=func.now(),
                        onupdate=utcnow, nullable=False)

    # Relationships
    accounts = relationship(
        "Account",
        back_populates="user",
        cascade="all, delete-orphan"
    )

    # ---------- validation & helpers ----------
    @validates("email")
    def validate_email(self, key, email: str):
        if not EMAIL_PATTERN.match(email or ""):
            raise ValueError("Please use a valid email address")
        return email.strip()

    @validates("name")
    def validate_name(self, key, name: str):
        if not name or not name.strip():
            raise ValueError("Name is required")
        return name.strip()

    def set_password(self, raw_password: str):
        self.password_hash = hash_password(raw_password)

    def verify_password(self, raw_password: str) -> bool:
        return verify_password(raw_password, self.password_hash)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, username={self.username})>"


# Case-insensitive unique email
Index("idx_users_email_lower", func.lower(User.email), unique=True)


# =============================
# OAuth accounts linked to a user
# =============================
class Account(Base):
    __tablename__ = "accounts"
    __table_args__ = (
        UniqueConstraint("provider", "provider_account_id", name="uq_accounts_provider_account"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    provider = Column(String(50), nullable=False)
    provider_account_id = Column(String(255), nullable=False)
    created_at = Column(TIMESTAMP, default=utcnow, server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="accounts")

    def __repr__(self):
        return f"<Account(id={self.id}, provider={self.provider}, user_id={self.user_id})>"

from sqlalchemy import Column, Integer, ForeignKey, TIMESTAMP, CheckConstraint, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from picwall.database.dbbase import Base, utcnow


class Follow(Base):
    __tablename__ = "follows"
    __table_args__ = (
        # a user can only follow another user once
        UniqueConstraint("follower_id", "following_id", name="uq_follows_follower_following"),
        CheckConstraint("follower_id <> following_id", name="ck_follows_not_self"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    follower_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    following_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(TIMESTAMP, default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP, default=utcnow, server_default=func.now(),
                        onupdate=utcnow, nullable=False)

    follower = relationship("User", foreign_keys=[follower_id])
    following = relationship("User", foreign_keys=[following_id])

    def __repr__(self):
        return f"<Follow(follower_id={self.follower_id}, following_id={self.following_id})>"

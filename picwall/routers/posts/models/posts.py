from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP, Text, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import validates, relationship

from picwall.database.dbbase import Base, utcnow

CAPTION_MAX_LENGTH = 2200


# =============================
# Posts
# =============================
class Post(Base):
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    caption = Column(String(CAPTION_MAX_LENGTH), nullable=True)
    image_url = Column(Text, nullable=False)
    image_key = Column(Text, nullable=False)

    created_at = Column(TIMESTAMP, default=utcnow, server_default=func.now(), nullable=False, index=True)
    updated_at = Column(TIMESTAMP, default=utcnow, server_default=func.now(),
                        onupdate=utcnow, nullable=False)

    user = relationship("User")
    likes = relationship(
        "Like",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="Like.id",
    )
    comments = relationship(
        "Comment",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="Comment.id",
    )

    @validates("caption")
    def validate_caption(self, key, caption):
        if caption is None:
            return caption
        caption = caption.strip()
        if len(caption) > CAPTION_MAX_LENGTH:
            raise ValueError(f"Caption cannot be longer than {CAPTION_MAX_LENGTH} characters")
        return caption

    @validates("image_url", "image_key")
    def validate_image(self, key, value):
        if not value:
            raise ValueError(f"{key.replace('_', ' ').capitalize()} is required")
        return value

    def __repr__(self):
        return f"<Post(id={self.id}, user_id={self.user_id})>"


# =============================
# Likes (one row per user per post)
# =============================
class Like(Base):
    __tablename__ = "post_likes"
    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_post_likes_post_user"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(TIMESTAMP, default=utcnow, server_default=func.now(), nullable=False)

    post = relationship("Post", back_populates="likes")

    def __repr__(self):
        return f"<Like(post_id={self.post_id}, user_id={self.user_id})>"


# =============================
# Comments
# =============================
class Comment(Base):
    __tablename__ = "post_comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP, default=utcnow, server_default=func.now(), nullable=False)

    post = relationship("Post", back_populates="comments")
    user = relationship("User")

    @validates("text")
    def validate_text(self, key, text):
        if not text or not text.strip():
            raise ValueError("Comment text is required")
        return text.strip()

    def __repr__(self):
        return f"<Comment(id={self.id}, post_id={self.post_id}, user_id={self.user_id})>"

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from storefront.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class ContactThreadModel(Base):
    __tablename__ = "contact_threads"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    user_id = Column(String(64), nullable=True, index=True)
    name = Column(String, nullable=False, default="Guest")
    email = Column(String, nullable=False, default="")
    message = Column(Text, nullable=False)
    handled = Column(Boolean, nullable=False, default=False)

    unread_by_user = Column(Integer, nullable=False, default=0)
    unread_by_admin = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    replies = relationship(
        "ContactReplyModel",
        back_populates="thread",
        cascade="all, delete-orphan",
        order_by="ContactReplyModel.id",
    )


class ContactReplyModel(Base):
    __tablename__ = "contact_replies"

    id = Column(Integer, primary_key=True)
    thread_id = Column(String(32), ForeignKey("contact_threads.id", ondelete="CASCADE"), nullable=False)
    sender_role = Column(String(8), nullable=False)  # user | admin
    message = Column(Text, nullable=False)
    read_by_user = Column(Boolean, nullable=False, default=False)
    read_by_admin = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    thread = relationship("ContactThreadModel", back_populates="replies")

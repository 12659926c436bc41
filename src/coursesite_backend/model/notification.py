from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, func

from .base import Base


class Notification(Base):
    __tablename__ = 'user_notification'
    __table_args__ = (
        Index('user_notification_user_created_key', 'user_id', 'created_at'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(ForeignKey('user.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    message = Column(String(1024), nullable=False)
    link = Column(String(1024), nullable=False, default="")
    image_url = Column(String(1024), nullable=False, default="")
    read_at = Column(DateTime)

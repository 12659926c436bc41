from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func

from .base import Base


class User(Base):
    __tablename__ = 'user'

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    email_token = Column(String(64))
    is_admin = Column(Boolean, nullable=False, default=False)
    password_hash = Column(String(64), nullable=False)
    password_salt = Column(String(64), nullable=False)
    cookie_salt = Column(String(64), nullable=False)
    temp_password_hash = Column(String(64))
    temp_password_issued_at = Column(DateTime)
    avatar_attachment_id = Column(ForeignKey('attachment.id', ondelete='SET NULL', use_alter=True, name='fk_user_avatar_attachment'))
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    created_from = Column(String(64))
    last_visit_at = Column(DateTime)
    last_visit_from = Column(String(64))
    current_visit_at = Column(DateTime)
    current_visit_from = Column(String(64))

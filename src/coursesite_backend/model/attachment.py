from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String, func

from .base import Base


class Attachment(Base):
    __tablename__ = 'attachment'

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_by = Column(ForeignKey('user.id', ondelete='SET NULL'))
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    name = Column(String(255), nullable=False)
    size = Column(BigInteger, nullable=False, default=0)

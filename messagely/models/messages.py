from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey
from . import Base

class Message(Base):
    __tablename__ = 'messages'
    id = Column(Integer, primary_key=True, autoincrement=True)
    from_username = Column(Text, ForeignKey('users.username'), index=True, nullable=False)
    to_username = Column(Text, ForeignKey('users.username'), index=True, nullable=False)
    body = Column(Text, nullable=False)
    sent_at = Column(DateTime(timezone=True), nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=True)

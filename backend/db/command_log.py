from sqlalchemy import Boolean, Column, DateTime, Integer, Text
from sqlalchemy.sql import func

from .database import Base


class CommandLog(Base):
    """Append-only record of each command and the response sent back."""
    __tablename__ = "command_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date_created = Column(DateTime, nullable=False, server_default=func.now(), index=True)
    command = Column(Text, nullable=False, index=True)
    data_in = Column(Text, nullable=True)
    data_out = Column(Text, nullable=True)
    succeeded = Column(Boolean, nullable=False, default=True)

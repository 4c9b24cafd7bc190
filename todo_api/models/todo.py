from sqlalchemy import Boolean, Column, Integer, Text, false

from todo_api.database import Base


class Todo(Base):
    __tablename__ = "todos"
    # ids are never handed out twice, even after the newest row is deleted
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    task = Column(Text, nullable=False)
    completed = Column(Boolean, default=False, server_default=false())

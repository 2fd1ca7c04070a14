from sqlalchemy import JSON, Column, String

from fireshop.database import Base


class Node(Base):
    __tablename__ = "nodes"

    path = Column(String, primary_key=True)        # slash separated, no leading slash
    value = Column(JSON, nullable=False)           # scalar leaf value

import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Enum, func
from tagform.config.database_config import Base
from tagform.constants.utils import WORKSPACE_TYPE


class Workspace(Base):
    __tablename__ = "workspaces"

    id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        unique=True,
    )

    name = Column(String(255), nullable=False)
    type = Column(
        Enum(*WORKSPACE_TYPE.ALL, name="workspace_type"),
        nullable=False,
        default=WORKSPACE_TYPE.PRIVATE,
    )
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    slug = Column(String(255), nullable=False, unique=True, index=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

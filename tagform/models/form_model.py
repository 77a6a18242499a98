import uuid
from sqlalchemy import Column, String, Text, DateTime, Boolean, ForeignKey, UniqueConstraint, func
from tagform.config.database_config import Base


class Form(Base):
    __tablename__ = "forms"
    __table_args__ = (
        UniqueConstraint("workspace_id", "slug", name="forms_workspace_slug_key"),
    )

    id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        unique=True,
    )

    workspace_id = Column(
        String(36),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_private = Column(Boolean, nullable=False, default=False)
    slug = Column(String(255), nullable=False)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


class FormSettings(Base):
    __tablename__ = "form_settings"

    id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        unique=True,
    )

    form_id = Column(
        String(36),
        ForeignKey("forms.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    landing_page_title = Column(String(255), nullable=False)
    landing_page_description = Column(Text, nullable=True)
    landing_page_button_text = Column(String(255), nullable=False)
    show_progress_bar = Column(Boolean, nullable=False, default=True)
    ending_page_title = Column(String(255), nullable=False)
    ending_page_description = Column(Text, nullable=True)
    ending_page_button_text = Column(String(255), nullable=False)
    redirect_url = Column(String(2048), nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

import uuid
from sqlalchemy import Column, String, Text, DateTime, Boolean, Integer, ForeignKey, Enum, func
from tagform.config.database_config import Base
from tagform.constants.utils import QUESTION_TYPE


class Question(Base):
    __tablename__ = "questions"

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
        index=True,
    )

    type = Column(Enum(*QUESTION_TYPE.ALL, name="question_type"), nullable=False)
    text = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    is_required = Column(Boolean, nullable=False, default=False)
    max_chars = Column(Integer, nullable=True)
    order = Column(Integer, nullable=False)

    # Hierarchy: path is the dot-joined chain of ancestor ids ending with id
    parent_id = Column(
        String(36),
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    path = Column(Text, nullable=False, index=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


class QuestionChoice(Base):
    __tablename__ = "question_choices"

    id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        unique=True,
    )

    question_id = Column(
        String(36),
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    text = Column(Text, nullable=False)
    order = Column(Integer, nullable=False)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

import uuid
from sqlalchemy import Column, String, DateTime, Integer, Float, ForeignKey, JSON, func
from tagform.config.database_config import Base


class FormAnalytics(Base):
    __tablename__ = "form_analytics"

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

    total_submissions = Column(Integer, nullable=False, default=0)
    average_completion_time = Column(Float, nullable=True)  # seconds
    last_submission_at = Column(DateTime, nullable=True)

    updated_at = Column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


class QuestionAnalytics(Base):
    __tablename__ = "question_analytics"

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
        unique=True,
    )

    total_responses = Column(Integer, nullable=False, default=0)
    # Choice questions
    choice_distribution = Column(JSON, nullable=True)
    # Text questions
    average_response_length = Column(Float, nullable=True)
    common_responses = Column(JSON, nullable=True)

    updated_at = Column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

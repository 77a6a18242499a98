import uuid
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Enum, JSON, UniqueConstraint, func
from tagform.config.database_config import Base
from tagform.constants.utils import SUBMISSION_STATUS


class FormSubmission(Base):
    __tablename__ = "form_submissions"
    __table_args__ = (
        # One submission per email per form
        UniqueConstraint("form_id", "email", name="form_submissions_form_email_key"),
    )

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

    email = Column(String(255), nullable=False, index=True)
    status = Column(
        Enum(*SUBMISSION_STATUS.ALL, name="submission_status"),
        nullable=False,
        default=SUBMISSION_STATUS.IN_PROGRESS,
    )
    started_at = Column(DateTime, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    completion_time = Column(Integer, nullable=True)  # seconds

    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    # "metadata" is reserved on declarative classes
    extra_metadata = Column("metadata", JSON, nullable=True)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


class QuestionResponse(Base):
    __tablename__ = "question_responses"

    id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        unique=True,
    )

    submission_id = Column(
        String(36),
        ForeignKey("form_submissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    question_id = Column(
        String(36),
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    response_data = Column(JSON, nullable=False)
    choice_id = Column(
        String(36),
        ForeignKey("question_choices.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    submitted_at = Column(DateTime, server_default=func.now(), nullable=False)

"""SQLAlchemy модели базы данных."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.core.database import Base

PR_STATUS_OPEN = "OPEN"
PR_STATUS_MERGED = "MERGED"

pr_reviewers = Table(
    "pr_reviewers",
    Base.metadata,
    Column(
        "pull_request_id",
        String(255),
        ForeignKey("pull_requests.pull_request_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column(
        "reviewer_id",
        String(255),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("assigned_at", DateTime, default=datetime.utcnow, nullable=False),
    UniqueConstraint("pull_request_id", "reviewer_id", name="uq_pr_reviewers_pr_reviewer"),
    Index("idx_pr_reviewers_reviewer", "reviewer_id"),
)


class Team(Base):
    """Модель команды."""

    __tablename__ = "teams"
    __table_args__ = (
        UniqueConstraint("team_name", name="uq_teams_team_name"),
        {"comment": "Команды"},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_name = Column(String(255), nullable=False, comment="Название команды")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, comment="Дата создания")

    members = relationship(
        "User",
        back_populates="team",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="User.username, User.user_id",
    )


class User(Base):
    """Модель пользователя."""

    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_team_active", "team_id", "is_active"),
        {"comment": "Пользователи"},
    )

    user_id = Column(String(255), primary_key=True, nullable=False, comment="ID пользователя")
    username = Column(String(255), nullable=False, comment="Имя пользователя")
    team_id = Column(
        Integer,
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        comment="ID команды",
    )
    is_active = Column(Boolean, default=True, nullable=False, comment="Флаг активности")

    team = relationship("Team", back_populates="members")


class PullRequest(Base):
    """Модель Pull Request."""

    __tablename__ = "pull_requests"
    __table_args__ = (
        Index("idx_pr_author", "author_id"),
        Index("idx_pr_status", "status"),
        {"comment": "Pull Request'ы"},
    )

    pull_request_id = Column(String(255), primary_key=True, nullable=False, comment="ID PR")
    pull_request_name = Column(String(500), nullable=False, comment="Название PR")
    author_id = Column(
        String(255),
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        comment="ID автора",
    )
    status = Column(
        String(20), default=PR_STATUS_OPEN, nullable=False, comment="Статус: OPEN или MERGED"
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, comment="Дата создания")
    merged_at = Column(DateTime, nullable=True, comment="Дата merge")
    need_more_reviewers = Column(
        Boolean, default=False, nullable=False, comment="Ревьюверов меньше целевого числа"
    )

"""Репозиторий для работы с назначениями ревьюверов (таблица pr_reviewers)."""

from datetime import datetime

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NoCandidateException, NotAssignedException
from app.db.models import PullRequest, pr_reviewers
from app.db.repositories.base import atomic


class ReviewerRepository:
    """Репозиторий назначений ревьюверов."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_assigned_reviewers(self, pr_id: str) -> list[str]:
        """Получить ID ревьюверов PR в порядке назначения."""
        result = await self.session.execute(
            select(pr_reviewers.c.reviewer_id)
            .where(pr_reviewers.c.pull_request_id == pr_id)
            .order_by(pr_reviewers.c.assigned_at)
        )
        return list(result.scalars().all())

    async def get_prs_by_reviewer(self, user_id: str) -> list[PullRequest]:
        """Получить PR'ы, где пользователь ревьювер (сначала новые)."""
        query = (
            select(PullRequest)
            .join(pr_reviewers, PullRequest.pull_request_id == pr_reviewers.c.pull_request_id)
            .where(pr_reviewers.c.reviewer_id == user_id)
            .order_by(PullRequest.created_at.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def add_reviewers(self, pr_id: str, reviewer_ids: list[str]) -> None:
        """Назначить ревьюверов на PR."""
        for reviewer_id in reviewer_ids:
            await self.session.execute(
                insert(pr_reviewers).values(
                    pull_request_id=pr_id,
                    reviewer_id=reviewer_id,
                    assigned_at=datetime.utcnow(),
                )
            )

    async def remove_reviewer(self, pr_id: str, reviewer_id: str) -> int:
        """Снять ревьювера с PR. Возвращает число удалённых строк."""
        result = await self.session.execute(
            delete(pr_reviewers).where(
                pr_reviewers.c.pull_request_id == pr_id,
                pr_reviewers.c.reviewer_id == reviewer_id,
            )
        )
        return result.rowcount or 0

    async def reassign_reviewer_atomic(
        self, pr_id: str, old_reviewer_id: str, new_reviewer_id: str
    ) -> None:
        """Заменить ревьювера одной транзакцией: удаление старой пары и вставка новой."""
        async with atomic(self.session):
            removed = await self.remove_reviewer(pr_id, old_reviewer_id)
            if not removed:
                # пару успели снять параллельным запросом
                raise NotAssignedException()
            try:
                await self.add_reviewers(pr_id, [new_reviewer_id])
            except IntegrityError as exc:
                # нового ревьювера уже назначил параллельный запрос
                raise NoCandidateException(
                    "replacement candidate was assigned concurrently"
                ) from exc

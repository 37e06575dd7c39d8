"""Репозиторий для работы с Pull Request'ами."""

from datetime import datetime

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import PRExistsException
from app.db.models import PR_STATUS_MERGED, PR_STATUS_OPEN, PullRequest, pr_reviewers
from app.db.repositories.base import BaseRepository
from app.db.repositories.reviewer_repository import ReviewerRepository


class PRRepository(BaseRepository[PullRequest]):
    """Репозиторий Pull Request'ов."""

    def __init__(self, session: AsyncSession):
        super().__init__(PullRequest, session)

    async def get_by_id(self, pr_id: str) -> PullRequest | None:
        """Получить PR по ID."""
        result = await self.session.execute(
            select(PullRequest).where(PullRequest.pull_request_id == pr_id)
        )
        return result.scalar_one_or_none()

    async def exists(self, pr_id: str) -> bool:
        """Проверить существование PR."""
        result = await self.session.execute(
            select(PullRequest.pull_request_id).where(PullRequest.pull_request_id == pr_id)
        )
        return result.scalar_one_or_none() is not None

    async def create_with_reviewers(
        self,
        pr_id: str,
        pr_name: str,
        author_id: str,
        reviewer_ids: list[str],
        need_more_reviewers: bool,
    ) -> PullRequest:
        """Создать PR вместе с ревьюверами и флагом need_more_reviewers одной транзакцией."""
        pr = PullRequest(
            pull_request_id=pr_id,
            pull_request_name=pr_name,
            author_id=author_id,
            status=PR_STATUS_OPEN,
            created_at=datetime.utcnow(),
            need_more_reviewers=need_more_reviewers,
        )
        async with self.atomic():
            self.session.add(pr)
            try:
                await self.session.flush()
            except IntegrityError as exc:
                # PR с таким id вставили параллельно после проверки exists
                raise PRExistsException() from exc
            await ReviewerRepository(self.session).add_reviewers(pr_id, reviewer_ids)
        return pr

    async def merge(self, pr_id: str) -> bool:
        """
        Перевести PR в MERGED.
        Обновление условное (только из OPEN), поэтому повторный merge не меняет merged_at.
        Возвращает True, если статус изменился в этом вызове.
        """
        result = await self.session.execute(
            update(PullRequest)
            .where(PullRequest.pull_request_id == pr_id, PullRequest.status == PR_STATUS_OPEN)
            .values(status=PR_STATUS_MERGED, merged_at=datetime.utcnow())
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
        return bool(result.rowcount)

    async def set_need_more_reviewers(self, pr_ids: list[str], value: bool = True) -> None:
        """Установить флаг need_more_reviewers для списка PR."""
        if not pr_ids:
            return
        await self.session.execute(
            update(PullRequest)
            .where(PullRequest.pull_request_id.in_(pr_ids))
            .values(need_more_reviewers=value)
            .execution_options(synchronize_session="fetch")
        )

    async def get_stats(self) -> dict:
        """Получить статистику по PR."""
        stats_query = select(
            func.count(PullRequest.pull_request_id).label("total_prs"),
            func.sum(case((PullRequest.status == PR_STATUS_OPEN, 1), else_=0)).label("open_prs"),
            func.sum(case((PullRequest.status == PR_STATUS_MERGED, 1), else_=0)).label(
                "merged_prs"
            ),
            func.sum(case((PullRequest.need_more_reviewers.is_(True), 1), else_=0)).label(
                "need_more"
            ),
        )
        result = await self.session.execute(stats_query)
        row = result.one()

        pr_reviewer_counts = (
            select(
                PullRequest.pull_request_id,
                func.count(pr_reviewers.c.reviewer_id).label("reviewer_count"),
            )
            .outerjoin(
                pr_reviewers, PullRequest.pull_request_id == pr_reviewers.c.pull_request_id
            )
            .group_by(PullRequest.pull_request_id)
            .subquery()
        )

        count_query = select(
            func.sum(case((pr_reviewer_counts.c.reviewer_count == 0, 1), else_=0)).label("count_0"),
            func.sum(case((pr_reviewer_counts.c.reviewer_count == 1, 1), else_=0)).label("count_1"),
            func.sum(case((pr_reviewer_counts.c.reviewer_count == 2, 1), else_=0)).label("count_2"),
        ).select_from(pr_reviewer_counts)
        count_result = await self.session.execute(count_query)
        count_row = count_result.one()

        return {
            "total_prs": row.total_prs or 0,
            "open_prs": int(row.open_prs or 0),
            "merged_prs": int(row.merged_prs or 0),
            "need_more_reviewers_prs": int(row.need_more or 0),
            "prs_with_0_reviewers": int(count_row.count_0 or 0),
            "prs_with_1_reviewer": int(count_row.count_1 or 0),
            "prs_with_2_reviewers": int(count_row.count_2 or 0),
        }

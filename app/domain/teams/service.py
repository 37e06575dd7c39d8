"""Сервис для работы с командами."""

import logging
import random

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundException, TeamExistsException
from app.db.models import Team
from app.db.repositories.interfaces import TeamStore
from app.db.repositories.team_repository import TeamRepository
from app.domain.base_service import BaseService
from app.schemas.team import TeamMemberSchema

logger = logging.getLogger(__name__)


class TeamService(BaseService):
    """Сервис для работы с командами."""

    def __init__(
        self,
        session: AsyncSession,
        rng: random.Random | None = None,
        *,
        team_repo: TeamStore | None = None,
    ):
        super().__init__(session, rng)
        self.team_repo = team_repo or TeamRepository(session)

    async def create_team(self, team_name: str, members: list[dict]) -> dict:
        """Создать команду с участниками (существующие пользователи обновляются)."""
        if await self.team_repo.exists(team_name):
            raise TeamExistsException()

        members_data = [TeamMemberSchema(**member).model_dump() for member in members]
        team = await self.team_repo.create_with_members(team_name, members_data)

        logger.info("team %s created with %d member(s)", team_name, len(team.members))
        return {"team": self._team_to_schema(team)}

    async def get_team(self, team_name: str) -> dict:
        """Получить команду с участниками."""
        team = await self.team_repo.get_by_name(team_name, load_members=True)
        if not team:
            raise NotFoundException("Team")

        return {"team": self._team_to_schema(team)}

    async def delete_team(self, team_name: str) -> dict:
        """Удалить команду вместе с участниками."""
        if not await self.team_repo.delete_by_name(team_name):
            raise NotFoundException("Team")

        logger.info("team %s deleted", team_name)
        return {"team_name": team_name}

    def _team_to_schema(self, team: Team) -> dict:
        """Преобразовать модель в схему."""
        return {
            "team_name": team.team_name,
            "members": [
                {
                    "user_id": member.user_id,
                    "username": member.username,
                    "is_active": member.is_active,
                }
                for member in team.members
            ],
        }

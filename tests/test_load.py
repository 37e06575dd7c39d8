"""
Нагрузочный сценарий против запущенного сервиса: python tests/test_load.py
Для pytest здесь тестов нет (файл исключён из сбора в pyproject.toml).
"""

import asyncio
import random
import statistics
import time
import uuid
from collections import Counter, defaultdict

import httpx
from faker import Faker

fake = Faker()
BASE_URL = "http://localhost:8080"


def random_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


class World:
    """То, что клиент знает о данных сервиса. Меняется только из одного event loop."""

    def __init__(self):
        self.teams: dict[str, list[str]] = {}
        self.open_prs: set[str] = set()

    def any_user(self) -> str:
        return random.choice(random.choice(list(self.teams.values())))

    def any_open_pr(self) -> str | None:
        return random.choice(tuple(self.open_prs)) if self.open_prs else None


class Report:
    """Время ответа и коды ошибок по каждой операции."""

    def __init__(self):
        self.timings: dict[str, list[float]] = defaultdict(list)
        self.errors: dict[str, Counter] = defaultdict(Counter)

    def show(self, duration: int):
        for op in sorted(set(self.timings) | set(self.errors)):
            times = sorted(self.timings[op])
            failed = sum(self.errors[op].values())
            server_errors = sum(n for code, n in self.errors[op].items() if code.startswith("5"))
            print(f"\n{op}: {len(times) + failed} запросов, {(len(times) + failed) / duration:.1f} RPS")
            print(f"  5xx: {server_errors}, прочие ошибки: {dict(self.errors[op])}")
            if times:
                print(
                    f"  мс: среднее={statistics.mean(times):.1f} "
                    f"p50={times[len(times) // 2]:.1f} "
                    f"p95={times[int(len(times) * 0.95)]:.1f} "
                    f"p99={times[int(len(times) * 0.99)]:.1f} макс={times[-1]:.1f}"
                )


async def call(client: httpx.AsyncClient, method: str, path: str, **kwargs) -> dict:
    response = await client.request(method, f"{BASE_URL}{path}", **kwargs)
    response.raise_for_status()
    return response.json()


async def add_team(client: httpx.AsyncClient, world: World, size: int):
    team_name = random_id("team")
    members = [
        {"user_id": random_id("u"), "username": fake.name(), "is_active": True}
        for _ in range(size)
    ]
    await call(client, "POST", "/team/add", json={"team_name": team_name, "members": members})
    world.teams[team_name] = [m["user_id"] for m in members]


async def create_pr(client: httpx.AsyncClient, world: World):
    pr_id = random_id("pr")
    await call(
        client,
        "POST",
        "/pullRequest/create",
        json={
            "pull_request_id": pr_id,
            "pull_request_name": fake.sentence(),
            "author_id": world.any_user(),
        },
    )
    world.open_prs.add(pr_id)


async def merge_pr(client: httpx.AsyncClient, world: World):
    pr_id = world.any_open_pr()
    if pr_id:
        await call(client, "POST", "/pullRequest/merge", json={"pull_request_id": pr_id})
        world.open_prs.discard(pr_id)


async def reassign(client: httpx.AsyncClient, world: World):
    pr_id = world.any_open_pr()
    if not pr_id:
        return
    pr = (await call(client, "GET", "/pullRequest/get", params={"pull_request_id": pr_id}))["pr"]
    if pr["assigned_reviewers"]:
        await call(
            client,
            "POST",
            "/pullRequest/reassign",
            json={"pull_request_id": pr_id, "old_user_id": random.choice(pr["assigned_reviewers"])},
        )


async def toggle_user(client: httpx.AsyncClient, world: World):
    await call(
        client,
        "POST",
        "/users/setIsActive",
        json={"user_id": world.any_user(), "is_active": random.random() < 0.7},
    )


async def deactivate_some(client: httpx.AsyncClient, world: World):
    team_name = random.choice(list(world.teams))
    members = world.teams[team_name]
    batch = random.sample(members, random.randint(1, max(1, len(members) // 5)))
    await call(
        client,
        "POST",
        "/users/deactivateTeamMembers",
        json={"team_name": team_name, "user_ids": batch},
    )


async def read_reviews(client: httpx.AsyncClient, world: World):
    await call(client, "GET", "/users/getReview", params={"user_id": world.any_user()})


async def read_team(client: httpx.AsyncClient, world: World):
    await call(client, "GET", "/team/get", params={"team_name": random.choice(list(world.teams))})


async def read_stats(client: httpx.AsyncClient, world: World):
    await call(client, "GET", "/stats")


# операция -> вес в общем потоке запросов
OPERATIONS = {
    read_reviews: 30,
    read_team: 20,
    read_stats: 5,
    create_pr: 20,
    reassign: 10,
    merge_pr: 8,
    toggle_user: 5,
    deactivate_some: 2,
}


async def worker(client: httpx.AsyncClient, world: World, report: Report, deadline: float):
    ops, weights = list(OPERATIONS), list(OPERATIONS.values())
    while time.monotonic() < deadline:
        op = random.choices(ops, weights)[0]
        started = time.monotonic()
        try:
            await op(client, world)
            report.timings[op.__name__].append((time.monotonic() - started) * 1000)
        except httpx.HTTPStatusError as e:
            code = str(e.response.status_code)
            try:
                code = f"{code} {e.response.json()['error']['code']}"
            except (ValueError, KeyError):
                pass
            report.errors[op.__name__][code] += 1
        except httpx.TransportError as e:
            report.errors[op.__name__][type(e).__name__] += 1
        await asyncio.sleep(0.01)


async def run_load_test(
    teams: int = 20,
    users_per_team: int = 50,
    prs_per_team: int = 20,
    concurrency: int = 100,
    duration: int = 60,
):
    print(
        f"Команд: {teams} x {users_per_team} пользователей, PR на команду: {prs_per_team}, "
        f"параллельно: {concurrency}, длительность: {duration}с"
    )
    world = World()
    report = Report()
    async with httpx.AsyncClient(timeout=30.0) as client:
        started = time.monotonic()
        for _ in range(teams):
            await add_team(client, world, users_per_team)
        for _ in range(teams * prs_per_team):
            await create_pr(client, world)
        print(f"Данные подготовлены за {time.monotonic() - started:.1f}с")

        deadline = time.monotonic() + duration
        await asyncio.gather(
            *(worker(client, world, report, deadline) for _ in range(concurrency))
        )
    report.show(duration)


if __name__ == "__main__":
    asyncio.run(run_load_test())

import sys
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from rollcall.domain.attendance.jobs import NightlyRolloverJob
from rollcall.domain.attendance.models import Member
from rollcall.domain.attendance.repository import (
	InMemoryAttendanceRepository,
	InMemoryRosterRepository,
	InMemoryStreakRepository,
)
from rollcall.domain.attendance.seeder import AttendanceSeeder
from rollcall.domain.attendance.streaks import StreakEngine
from rollcall.domain.leaderboards.refresher import LeaderboardRefresher
from rollcall.main import app
from rollcall.settings import settings

IST = ZoneInfo("Asia/Kolkata")

class World:
	"""In-memory stores plus a job wired over them."""

	def __init__(self, members=(), clients=None, concurrency: int = 8) -> None:
		self.roster = InMemoryRosterRepository(members)
		self.attendance = InMemoryAttendanceRepository()
		self.streaks = InMemoryStreakRepository()
		self.refresher = LeaderboardRefresher(clients=clients or {}, ratings=self.roster, lookup_timeout=0.5)
		self.job = NightlyRolloverJob(
			roster=self.roster,
			seeder=AttendanceSeeder(self.attendance),
			refresher=self.refresher,
			streaks=StreakEngine(self.attendance, self.streaks),
			tz=IST,
			concurrency=concurrency,
		)


@pytest.fixture
def members() -> list[Member]:
	return [
		Member(id=7, roll_no="21CS007", name="Asha"),
		Member(id=9, roll_no="21CS009", name="Ravi", leaderboard_handle="ravi_cf", cp_platform="Codeforces", rating=1500),
		Member(id=42, roll_no="21CS042", name="Meera"),
	]


@pytest.fixture
def make_world():
	return World


@pytest.fixture
def world(members) -> World:
	return World(members)


@pytest.fixture
def admin_token():
	original = settings.obs_admin_token
	settings.obs_admin_token = "test-admin-token"
	try:
		yield settings.obs_admin_token
	finally:
		settings.obs_admin_token = original


@pytest_asyncio.fixture
async def api_client():
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client

import json

import httpx
import pytest

from rollcall.domain.common.exceptions import ExternalLookupError
from rollcall.domain.leaderboards.clients import CodeforcesClient, LeetCodeClient

CF_BASE = "https://codeforces.test/api"
LC_BASE = "https://leetcode.test"


def _client(handler) -> httpx.AsyncClient:
	return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _cf_rating(*ratings):
	return {
		"status": "OK",
		"result": [{"contestId": idx, "oldRating": 0, "newRating": value} for idx, value in enumerate(ratings)],
	}


@pytest.mark.asyncio
async def test_codeforces_rating_is_latest_contest():
	seen = []

	def handler(request: httpx.Request) -> httpx.Response:
		seen.append(request)
		return httpx.Response(200, json=_cf_rating(1400, 1520, 1488))

	async with _client(handler) as http:
		rating = await CodeforcesClient(http=http, base_url=CF_BASE).fetch_rating("tourist")

	assert rating == 1488
	assert seen[0].url.path == "/api/user.rating"
	assert seen[0].url.params["handle"] == "tourist"


@pytest.mark.asyncio
async def test_codeforces_empty_history_is_no_data():
	async with _client(lambda request: httpx.Response(200, json={"status": "OK", "result": []})) as http:
		assert await CodeforcesClient(http=http, base_url=CF_BASE).fetch_rating("newbie") is None


@pytest.mark.asyncio
async def test_codeforces_unknown_handle_is_no_data():
	body = {"status": "FAILED", "comment": "handle: User with handle ghost not found"}
	async with _client(lambda request: httpx.Response(400, json=body)) as http:
		assert await CodeforcesClient(http=http, base_url=CF_BASE).fetch_rating("ghost") is None


@pytest.mark.asyncio
async def test_codeforces_other_failure_raises():
	body = {"status": "FAILED", "comment": "Call limit exceeded"}
	async with _client(lambda request: httpx.Response(429, json=body)) as http:
		with pytest.raises(ExternalLookupError) as excinfo:
			await CodeforcesClient(http=http, base_url=CF_BASE).fetch_rating("tourist")
	assert excinfo.value.platform == "codeforces"
	assert excinfo.value.handle == "tourist"


@pytest.mark.asyncio
async def test_codeforces_html_error_page_raises():
	async with _client(lambda request: httpx.Response(502, text="<html>Bad gateway</html>")) as http:
		with pytest.raises(ExternalLookupError):
			await CodeforcesClient(http=http, base_url=CF_BASE).fetch_rating("tourist")


@pytest.mark.asyncio
async def test_codeforces_network_error_raises():
	def handler(request: httpx.Request) -> httpx.Response:
		raise httpx.ConnectError("connection refused", request=request)

	async with _client(handler) as http:
		with pytest.raises(ExternalLookupError):
			await CodeforcesClient(http=http, base_url=CF_BASE).fetch_rating("tourist")


@pytest.mark.asyncio
async def test_codeforces_stats_combine_profile_and_history():
	def handler(request: httpx.Request) -> httpx.Response:
		if request.url.path.endswith("user.info"):
			assert request.url.params["handles"] == "tourist"
			return httpx.Response(
				200,
				json={"status": "OK", "result": [{"handle": "tourist", "rating": 3500, "maxRating": 3800, "maxRank": "legendary grandmaster"}]},
			)
		return httpx.Response(200, json=_cf_rating(3400, 3500))

	async with _client(handler) as http:
		profile = await CodeforcesClient(http=http, base_url=CF_BASE).fetch_stats("tourist")

	assert profile.rating == 3500
	assert profile.max_rating == 3800
	assert profile.max_rank == "legendary grandmaster"
	assert profile.contests_participated == 2


def _lc_payload(matched_user=True):
	user = None
	if matched_user:
		user = {
			"profile": {"ranking": 12345},
			"submitStatsGlobal": {
				"acSubmissionNum": [
					{"difficulty": "All", "count": 300},
					{"difficulty": "Easy", "count": 150},
					{"difficulty": "Medium", "count": 120},
					{"difficulty": "Hard", "count": 30},
				]
			},
		}
	return {
		"data": {
			"matchedUser": user,
			"userContestRanking": {"attendedContestsCount": 14, "globalRanking": 8021} if matched_user else None,
			"userContestRankingHistory": [{"attended": True}] * 20 if matched_user else None,
		}
	}


@pytest.mark.asyncio
async def test_leetcode_stats_parsed_from_graphql():
	seen = []

	def handler(request: httpx.Request) -> httpx.Response:
		seen.append(json.loads(request.content))
		return httpx.Response(200, json=_lc_payload())

	async with _client(handler) as http:
		client = LeetCodeClient(http=http, base_url=LC_BASE)
		profile = await client.fetch_stats("asha")
		rating = await client.fetch_rating("asha")

	assert seen[0]["variables"] == {"username": "asha"}
	assert profile.problems_solved == 300
	assert (profile.easy_solved, profile.medium_solved, profile.hard_solved) == (150, 120, 30)
	assert profile.contests_participated == 14
	assert profile.global_ranking == 8021
	assert profile.total_contests == 20
	assert rating == 12345


@pytest.mark.asyncio
async def test_leetcode_unknown_user_is_no_data():
	async with _client(lambda request: httpx.Response(200, json=_lc_payload(matched_user=False))) as http:
		client = LeetCodeClient(http=http, base_url=LC_BASE)
		assert await client.fetch_stats("ghost") is None
		assert await client.fetch_rating("ghost") is None


@pytest.mark.asyncio
async def test_leetcode_http_error_raises():
	async with _client(lambda request: httpx.Response(500, text="oops")) as http:
		with pytest.raises(ExternalLookupError) as excinfo:
			await LeetCodeClient(http=http, base_url=LC_BASE).fetch_rating("asha")
	assert excinfo.value.platform == "leetcode"


@pytest.mark.parametrize(
	"matched_user",
	[
		"asha",
		{"profile": {"ranking": 10}, "submitStatsGlobal": {"acSubmissionNum": ["oops"]}},
		{"profile": {"ranking": 10}, "submitStatsGlobal": {"acSubmissionNum": {"All": 3}}},
		{"profile": [10], "submitStatsGlobal": {"acSubmissionNum": []}},
		{"profile": {"ranking": 10}, "submitStatsGlobal": "none"},
	],
)
@pytest.mark.asyncio
async def test_leetcode_malformed_user_raises_lookup_error(matched_user):
	body = {"data": {"matchedUser": matched_user, "userContestRanking": None}}
	async with _client(lambda request: httpx.Response(200, json=body)) as http:
		client = LeetCodeClient(http=http, base_url=LC_BASE)
		with pytest.raises(ExternalLookupError) as excinfo:
			await client.fetch_stats("asha")
		with pytest.raises(ExternalLookupError):
			await client.fetch_rating("asha")
	assert excinfo.value.platform == "leetcode"
	assert excinfo.value.handle == "asha"


@pytest.mark.asyncio
async def test_leetcode_malformed_contest_ranking_raises():
	payload = _lc_payload()
	payload["data"]["userContestRanking"] = [8021]
	async with _client(lambda request: httpx.Response(200, json=payload)) as http:
		with pytest.raises(ExternalLookupError):
			await LeetCodeClient(http=http, base_url=LC_BASE).fetch_stats("asha")


@pytest.mark.asyncio
async def test_codeforces_malformed_rating_entry_raises():
	body = {"status": "OK", "result": [{"newRating": 1400}, "oops"]}
	async with _client(lambda request: httpx.Response(200, json=body)) as http:
		with pytest.raises(ExternalLookupError):
			await CodeforcesClient(http=http, base_url=CF_BASE).fetch_rating("tourist")

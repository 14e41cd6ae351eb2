"""Tests for the write handlers, against a mocked store."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo

import pytest

from roundsapi.catalog.loader import EndpointCatalog
from roundsapi.config import AppConfig
from roundsapi.engine.context import RequestContext
from roundsapi.engine.writes import (
    LANGUAGE_INSERT_CONCURRENCY,
    create_contest,
    field_binds,
    round_events,
    round_languages,
    update_contest,
)
from roundsapi.persistence import DatabaseConfig
from roundsapi.query.transforms import FilterTransforms
from roundsapi.validation import register_builtin_validators

CONTEST_FIELDS = (
    "name", "startDate", "endDate", "status", "groupId", "adText", "adStart",
    "adEnd", "adTask", "adCommand", "activateMenu", "seasonId",
)


@pytest.fixture(scope="module")
def catalog():
    register_builtin_validators()
    catalog = EndpointCatalog()
    catalog.load_all()
    return catalog


@pytest.fixture
def store():
    data_access = AsyncMock()
    data_access.execute = AsyncMock(return_value=1)
    data_access.next_id = AsyncMock(return_value=42)
    return data_access


def make_ctx(catalog, store, zone: str = "UTC") -> RequestContext:
    config = AppConfig(database=DatabaseConfig("sqlite://"), timezone=ZoneInfo(zone))
    return RequestContext(
        config=config,
        user=None,
        data_access=store,
        transforms=FilterTransforms(config.timezone, catalog.tables),
        tables=catalog.tables,
    )


def contest_values(**overrides):
    values = dict.fromkeys(CONTEST_FIELDS)
    values["name"] = "SRM 700"
    values.update(overrides)
    return values


def executed(store) -> list[str]:
    return [call.args[0] for call in store.execute.await_args_list]


class TestFieldBinds:
    def test_snake_case_names(self, catalog, store):
        endpoint = catalog.get("createSRMContest")
        binds = field_binds(make_ctx(catalog, store), endpoint, contest_values(groupId=3))
        assert binds["group_id"] == 3
        assert binds["ad_text"] is None
        assert set(binds) == {
            "name", "start_date", "end_date", "status", "group_id", "ad_text", "ad_start",
            "ad_end", "ad_task", "ad_command", "activate_menu", "season_id",
        }

    def test_dates_become_store_literals(self, catalog, store):
        endpoint = catalog.get("createSRMContest")
        values = contest_values(
            startDate=datetime(2014, 3, 1, 10, 30),
            endDate=datetime(2020, 1, 1, 12, 0, tzinfo=timezone.utc),
        )
        binds = field_binds(make_ctx(catalog, store, "America/New_York"), endpoint, values)
        assert binds["start_date"] == "2014-03-01 10:30:00"
        assert binds["end_date"] == "2020-01-01 07:00:00"


class TestContests:
    @pytest.mark.asyncio
    async def test_create_draws_next_id(self, catalog, store):
        endpoint = catalog.get("createSRMContest")
        result = await create_contest(make_ctx(catalog, store), endpoint, contest_values())

        assert result == {"contestId": 42}
        store.next_id.assert_awaited_once_with("CONTEST_SEQ")
        name, binds = store.execute.await_args.args
        assert name == "insert_srm_contest"
        assert binds["contest_id"] == 42

    @pytest.mark.asyncio
    async def test_update_in_place(self, catalog, store):
        endpoint = catalog.get("updateSRMContest")
        values = contest_values(id=10, contestId=10)

        assert await update_contest(make_ctx(catalog, store), endpoint, values) == {
            "success": True
        }
        assert executed(store) == ["update_srm_contest"]
        assert store.execute.await_args.args[1]["contest_id"] == 10

    @pytest.mark.asyncio
    async def test_move_runs_steps_in_order(self, catalog, store):
        endpoint = catalog.get("updateSRMContest")
        values = contest_values(id=10, contestId=20)

        await update_contest(make_ctx(catalog, store), endpoint, values)

        assert executed(store) == [
            "insert_srm_contest",
            "update_srm_contest",
            "update_srm_contest_id",
            "delete_srm_contest",
        ]
        calls = store.execute.await_args_list
        assert calls[0].args[1]["contest_id"] == 20
        assert calls[2].args[1] == {"contest_id": 20, "id": 10}
        assert calls[3].args[1] == {"id": 10}

    @pytest.mark.asyncio
    async def test_failed_step_aborts_the_rest(self, catalog, store):
        endpoint = catalog.get("updateSRMContest")
        store.execute.side_effect = [1, RuntimeError("boom")]

        with pytest.raises(RuntimeError):
            await update_contest(make_ctx(catalog, store), endpoint,
                                 contest_values(id=10, contestId=20))
        assert executed(store) == ["insert_srm_contest", "update_srm_contest"]


class TestRoundSettings:
    @pytest.mark.asyncio
    async def test_languages_cleared_then_inserted_once_each(self, catalog, store):
        endpoint = catalog.get("setRoundLanguages")
        values = {"roundId": 100, "languages": [3, 1, 3], "knownLanguages": [1, 3, 4]}

        await round_languages(make_ctx(catalog, store), endpoint, values)

        assert executed(store)[0] == "srm_clear_round_languages"
        inserted = sorted(
            call.args[1]["language_id"] for call in store.execute.await_args_list[1:]
        )
        assert inserted == [1, 3]

    @pytest.mark.asyncio
    async def test_language_inserts_are_bounded(self, catalog, store):
        endpoint = catalog.get("setRoundLanguages")
        in_flight = 0
        peak = 0

        async def execute(name, params):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return 1

        store.execute = execute
        values = {"roundId": 100, "languages": list(range(1, 11))}
        await round_languages(make_ctx(catalog, store), endpoint, values)

        assert 1 < peak <= LANGUAGE_INSERT_CONCURRENCY

    @pytest.mark.asyncio
    async def test_events_replace(self, catalog, store):
        endpoint = catalog.get("setRoundEvents")
        values = {
            "roundId": 102,
            "eventId": 5,
            "eventName": "TCO14 Qualifier",
            "registrationUrl": "http://tco14.example.com/register",
        }

        await round_events(make_ctx(catalog, store), endpoint, values)

        assert executed(store) == ["srm_clear_round_events", "srm_insert_round_event"]
        assert store.execute.await_args.args[1] == {
            "round_id": 102,
            "event_id": 5,
            "event_name": "TCO14 Qualifier",
            "registration_url": "http://tco14.example.com/register",
        }

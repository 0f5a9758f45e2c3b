"""Unit tests for the interaction recorder with a mocked pool."""

from __future__ import annotations

import datetime
import uuid
from unittest.mock import AsyncMock

import asyncpg
import pytest

from people_network.store import (
    coerce_date,
    interaction_people,
    interaction_record,
    interaction_remove_person_on_date,
)
from tests._helpers import make_interaction_row, make_person_row, make_pool_and_conn

pytestmark = pytest.mark.unit

_DAY = datetime.date(2024, 3, 1)
_DAY_ID = uuid.UUID("dddddddd-0000-0000-0000-000000000001")


class TestCoerceDate:
    def test_accepts_iso_string(self):
        assert coerce_date("2024-03-01") == _DAY

    def test_accepts_date(self):
        assert coerce_date(_DAY) is _DAY

    @pytest.mark.parametrize("value", ["01/03/2024", "2024-02-30", "", 20240301])
    def test_rejects_malformed(self, value):
        with pytest.raises(ValueError, match="YYYY-MM-DD"):
            coerce_date(value)

    def test_rejects_datetime(self):
        with pytest.raises(ValueError, match="calendar date"):
            coerce_date(datetime.datetime(2024, 3, 1, 9, 30))


class TestInteractionRecord:
    async def test_new_day_attaches_people_in_one_transaction(self):
        pool, conn, tx = make_pool_and_conn()
        conn.fetchrow = AsyncMock(return_value=make_interaction_row(interaction_id=_DAY_ID))
        conn.execute = AsyncMock(return_value="INSERT 0 2")
        a, b = uuid.uuid4(), uuid.uuid4()

        result = await interaction_record(pool, "2024-03-01", [a, b])

        assert result["id"] == _DAY_ID
        assert tx.committed
        insert_day_sql = conn.fetchrow.call_args_list[0].args[0]
        assert "ON CONFLICT (date) DO NOTHING" in insert_day_sql
        member_sql, interaction_id, ids = conn.execute.call_args.args
        assert "ON CONFLICT (interaction_id, person_id) DO NOTHING" in member_sql
        assert "FROM person p" in member_sql
        assert interaction_id == _DAY_ID
        assert ids == [a, b]

    async def test_existing_day_is_reused(self):
        pool, conn, _ = make_pool_and_conn()
        existing = make_interaction_row(interaction_id=_DAY_ID)
        conn.fetchrow = AsyncMock(side_effect=[None, existing])

        result = await interaction_record(pool, _DAY, [uuid.uuid4()])

        assert result["id"] == _DAY_ID
        select_sql = conn.fetchrow.call_args_list[1].args[0]
        assert select_sql.startswith("SELECT")

    async def test_duplicate_ids_collapse(self):
        pool, conn, _ = make_pool_and_conn()
        conn.fetchrow = AsyncMock(return_value=make_interaction_row(interaction_id=_DAY_ID))
        a = uuid.uuid4()

        await interaction_record(pool, _DAY, [a, str(a), a])

        assert conn.execute.call_args.args[2] == [a]

    async def test_empty_person_ids_creates_day_only(self):
        pool, conn, tx = make_pool_and_conn()
        conn.fetchrow = AsyncMock(return_value=make_interaction_row(interaction_id=_DAY_ID))

        await interaction_record(pool, _DAY, [])

        conn.execute.assert_not_awaited()
        assert tx.committed

    async def test_membership_failure_rolls_back_and_propagates(self):
        pool, conn, tx = make_pool_and_conn()
        conn.fetchrow = AsyncMock(return_value=make_interaction_row(interaction_id=_DAY_ID))
        conn.execute = AsyncMock(side_effect=asyncpg.PostgresError("boom"))

        with pytest.raises(asyncpg.PostgresError):
            await interaction_record(pool, _DAY, [uuid.uuid4()])

        assert tx.rolled_back
        assert not tx.committed

    async def test_invalid_date_rejected_before_any_query(self):
        pool, _, _ = make_pool_and_conn()
        with pytest.raises(ValueError):
            await interaction_record(pool, "not-a-date", [])
        pool.acquire.assert_not_called()

    async def test_invalid_person_id_rejected(self):
        pool, _, _ = make_pool_and_conn()
        with pytest.raises(ValueError, match="Invalid person id"):
            await interaction_record(pool, _DAY, ["nope"])
        pool.acquire.assert_not_called()


async def test_people_are_parsed_and_ordered_by_name():
    pool, _, _ = make_pool_and_conn()
    pool.fetch = AsyncMock(return_value=[make_person_row(name="Ada"), make_person_row(name="Bo")])

    people = await interaction_people(pool, _DAY_ID)

    sql = pool.fetch.call_args.args[0]
    assert "ORDER BY p.name ASC" in sql
    assert "p.id, p.name, p.context, p.source, p.created_at" in sql
    assert [p["name"] for p in people] == ["Ada", "Bo"]


class TestRemovePersonOnDate:
    async def test_unknown_date_is_a_no_op(self):
        pool, _, _ = make_pool_and_conn()
        pool.fetchrow = AsyncMock(return_value=None)

        assert await interaction_remove_person_on_date(pool, _DAY, uuid.uuid4()) is False
        pool.execute.assert_not_awaited()

    async def test_deletes_membership(self):
        pool, _, _ = make_pool_and_conn()
        pool.fetchrow = AsyncMock(return_value=make_interaction_row(interaction_id=_DAY_ID))
        pool.execute = AsyncMock(return_value="DELETE 1")
        person_id = uuid.uuid4()

        assert await interaction_remove_person_on_date(pool, "2024-03-01", person_id) is True
        assert pool.execute.call_args.args[1:] == (_DAY_ID, person_id)

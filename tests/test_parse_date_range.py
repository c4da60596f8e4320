"""Tests for date range extraction from chat questions."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from app.chains.parse_date_range import (
    DateRangeOutput,
    DateRangeParseError,
    normalize_date_range,
    parse_date_range,
)
from app.db.todos import fetch_candidates_in_date_range

NOW = datetime(2026, 10, 19, 14, 25, 0, tzinfo=timezone.utc)


def _mock_llm(content=None, error=None):
    llm = MagicMock()
    if error is not None:
        llm.ainvoke = AsyncMock(side_effect=error)
    else:
        llm.ainvoke = AsyncMock(return_value=MagicMock(content=content))
    return llm


class TestNormalizeDateRange:
    def test_date_only_bounds_cover_whole_days(self):
        result = normalize_date_range(
            DateRangeOutput(needsFiltering=True, startDate="2026-10-19", endDate="2026-10-19")
        )

        assert result.start == datetime(2026, 10, 19, 0, 0, 0, tzinfo=timezone.utc)
        assert result.end == datetime(2026, 10, 19, 23, 59, 59, tzinfo=timezone.utc)

    def test_full_timestamps_kept(self):
        result = normalize_date_range(
            DateRangeOutput(
                needsFiltering=True,
                startDate="2026-10-12T00:00:00Z",
                endDate="2026-10-18T23:59:59Z",
            )
        )

        assert result.start == datetime(2026, 10, 12, tzinfo=timezone.utc)
        assert result.end == datetime(2026, 10, 18, 23, 59, 59, tzinfo=timezone.utc)

    def test_offsets_converted_to_utc(self):
        result = normalize_date_range(
            DateRangeOutput(
                needsFiltering=True,
                startDate="2026-10-19T02:00:00+02:00",
                endDate="2026-10-19T10:00:00",
            )
        )

        assert result.start == datetime(2026, 10, 19, 0, 0, tzinfo=timezone.utc)
        assert result.end == datetime(2026, 10, 19, 10, 0, tzinfo=timezone.utc)

    def test_reversed_bounds_are_swapped(self):
        result = normalize_date_range(
            DateRangeOutput(
                needsFiltering=True,
                startDate="2026-10-19T12:00:00Z",
                endDate="2026-10-18T12:00:00Z",
            )
        )

        assert result.start < result.end

    def test_no_filtering(self):
        assert normalize_date_range(DateRangeOutput(needsFiltering=False)) is None

    def test_missing_bound_raises(self):
        with pytest.raises(DateRangeParseError):
            normalize_date_range(DateRangeOutput(needsFiltering=True, startDate="2026-10-19"))

    def test_garbage_date_raises(self):
        with pytest.raises(DateRangeParseError):
            normalize_date_range(
                DateRangeOutput(needsFiltering=True, startDate="soon", endDate="later")
            )


class TestParseDateRange:
    @pytest.mark.asyncio
    async def test_tasks_from_today(self):
        llm = _mock_llm('{"needsFiltering": true, "startDate": "2026-10-19", "endDate": "2026-10-19"}')

        with patch("app.chains.parse_date_range.get_llm", return_value=llm) as mock_get_llm:
            result = await parse_date_range("tasks from today", NOW)

        assert result.start == datetime(2026, 10, 19, 0, 0, 0, tzinfo=timezone.utc)
        assert result.end == datetime(2026, 10, 19, 23, 59, 59, tzinfo=timezone.utc)
        assert mock_get_llm.call_args.kwargs["temperature"] == 0

        messages = llm.ainvoke.call_args.args[0]
        assert "2026-10-19T14:25:00Z" in messages[0]["content"]
        assert "Monday" in messages[0]["content"]
        assert messages[1] == {"role": "user", "content": "tasks from today"}

    @pytest.mark.asyncio
    async def test_fenced_json(self):
        llm = _mock_llm('```json\n{"needsFiltering": false}\n```')

        with patch("app.chains.parse_date_range.get_llm", return_value=llm):
            assert await parse_date_range("what did I change recently?", NOW) is None

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        llm = _mock_llm("Sure! Today is October 19.")

        with patch("app.chains.parse_date_range.get_llm", return_value=llm):
            with pytest.raises(DateRangeParseError):
                await parse_date_range("tasks from today", NOW)

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        llm = _mock_llm(error=RuntimeError("timeout"))

        with patch("app.chains.parse_date_range.get_llm", return_value=llm):
            with pytest.raises(DateRangeParseError):
                await parse_date_range("tasks from yesterday", NOW)


def test_date_range_query_bounds():
    """Creation-date filter is inclusive on both ends."""
    user_id = uuid4()
    sb = MagicMock()
    chain = MagicMock()
    for method in ("select", "eq", "gte", "lte", "order"):
        getattr(chain, method).return_value = chain
    chain.execute.return_value = MagicMock(data=[])
    sb.table.return_value = chain

    start = datetime(2026, 10, 19, 0, 0, 0, tzinfo=timezone.utc)
    end = datetime(2026, 10, 19, 23, 59, 59, tzinfo=timezone.utc)

    with patch("app.db.todos.get_supabase", return_value=sb):
        assert fetch_candidates_in_date_range(user_id, start, end) == []

    sb.table.assert_called_with("todos")
    chain.eq.assert_called_with("user_id", str(user_id))
    chain.gte.assert_called_once_with("created_at", "2026-10-19T00:00:00+00:00")
    chain.lte.assert_called_once_with("created_at", "2026-10-19T23:59:59+00:00")
    chain.order.assert_called_once_with("created_at", desc=True)

"""Tests for CSV record parsing and bulk import."""

from datetime import datetime, timedelta

import pytest

from shortlink.core.exceptions import InvalidPolicyError, InvalidRecordError, InvalidURLError
from shortlink.services.event_sink import Opcode
from shortlink.services.import_service import ImportService, is_header, parse_record

from conftest import NOW

IMPORTED_AT = NOW - timedelta(days=3)


@pytest.fixture
def import_service(binding_service) -> ImportService:
    return ImportService(binding_service)


class TestParseRecord:
    def test_url_only(self):
        request = parse_record(["https://example.com"])
        assert request.url == "https://example.com"
        assert request.id == ""
        assert request.ttl is None
        assert request.expire_on is None

    def test_all_columns(self):
        request = parse_record([
            "https://example.com",
            " custom ",
            "60",
            "3",
            "2027-01-01T00:00:00",
            "https://example.com/expired",
            "https://example.com/exhausted",
        ])
        assert request.id == "custom"
        assert request.ttl == 60
        assert request.max_requests == 3
        assert request.expire_on == datetime(2027, 1, 1)
        assert request.expired_url == "https://example.com/expired"
        assert request.exhausted_url == "https://example.com/exhausted"

    def test_blank_cells_are_unset(self):
        request = parse_record(["https://example.com", "", "", "5"])
        assert request.ttl is None
        assert request.max_requests == 5

    @pytest.mark.parametrize("record", [
        [],
        [""],
        ["https://example.com", "id", "soon"],
        ["https://example.com", "id", "-1"],
        ["https://example.com", "id", str(10**12)],
        ["https://example.com", "id", "", str(2**64)],
        ["https://example.com", "id", "", "", "tomorrow"],
        ["https://example.com", "", "", "", "", "", "", "extra"],
    ])
    def test_malformed_records(self, record):
        with pytest.raises(InvalidRecordError):
            parse_record(record)

    def test_is_header(self):
        assert is_header(["URL", "id"])
        assert is_header([" url "])
        assert not is_header(["https://example.com"])
        assert not is_header([])


class TestImportRecords:
    @pytest.mark.asyncio
    async def test_stops_at_first_bad_row(self, import_service, store):
        records = [
            ["url", "id"],
            ["https://example.com/1", "one"],
            ["https://example.com/2", "two"],
            ["https://example.com/3", "three"],
            ["not a url", "four"],
            ["https://example.com/5", "five"],
        ]

        result = await import_service.import_records(records, imported_at=IMPORTED_AT)

        assert result.rows == 3
        assert isinstance(result.error, InvalidURLError)
        assert not result.ok
        assert sorted(store.bindings) == ["one", "three", "two"]

    @pytest.mark.asyncio
    async def test_parse_failure_stops_import(self, import_service, store):
        records = [
            ["https://example.com/1", "one"],
            ["https://example.com/2", "two", "abc"],
            ["https://example.com/3", "three"],
        ]

        result = await import_service.import_records(records)

        assert result.rows == 1
        assert isinstance(result.error, InvalidRecordError)
        assert list(store.bindings) == ["one"]

    @pytest.mark.asyncio
    async def test_out_of_range_ttl_keeps_row_count(self, import_service, store):
        records = [
            ["https://example.com/1", "one"],
            ["https://example.com/2", "two", str(10**12)],
        ]

        result = await import_service.import_records(records)

        assert result.rows == 1
        assert isinstance(result.error, InvalidRecordError)
        assert list(store.bindings) == ["one"]

    @pytest.mark.asyncio
    async def test_unrepresentable_expiration_keeps_row_count(self, import_service, store):
        records = [
            ["https://example.com/1", "one"],
            ["https://example.com/2", "two", "7200"],
        ]

        result = await import_service.import_records(records, imported_at=datetime(9999, 12, 31, 23))

        assert result.rows == 1
        assert isinstance(result.error, InvalidPolicyError)
        assert list(store.bindings) == ["one"]

    @pytest.mark.asyncio
    async def test_relaxed_ids_and_shared_bound_at(self, import_service, store, sink):
        records = [
            ["https://example.com/1", "Not-Generator-Shaped!"],
            ["https://example.com/2", "x", "60"],
            ["https://example.com/3"],
        ]

        result = await import_service.import_records(records, imported_at=IMPORTED_AT)

        assert result.ok
        assert result.rows == 3
        assert {b.bound_at for b in store.bindings.values()} == {IMPORTED_AT}
        assert store.bindings["x"].expire_on == IMPORTED_AT + timedelta(seconds=60)
        assert "gen001" in store.bindings
        assert [e.opcode for e in sink.events] == [Opcode.INSERT] * 3

    @pytest.mark.asyncio
    async def test_header_only_skipped_in_first_position(self, import_service, store):
        result = await import_service.import_records([
            ["https://example.com/1", "one"],
            ["url", "two"],
        ])
        assert result.rows == 1
        assert isinstance(result.error, InvalidURLError)

    @pytest.mark.asyncio
    async def test_empty_input(self, import_service):
        result = await import_service.import_records([])
        assert result.rows == 0
        assert result.ok


class TestImportCSV:
    @pytest.mark.asyncio
    async def test_import_csv_text(self, import_service, store):
        text = (
            "url,id,ttl,max_requests\n"
            "https://example.com/a,a1,,2\n"
            "\n"
            "\"https://example.com/b?x=1,2\",b1\n"
        )

        result = await import_service.import_csv(text, imported_at=IMPORTED_AT)

        assert result.rows == 2
        assert result.ok
        assert store.bindings["a1"].max_requests == 2
        assert store.bindings["b1"].url == "https://example.com/b?x=1,2"

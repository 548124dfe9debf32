"""Unit tests for KeysetPaginator against an in-memory source."""
from __future__ import annotations

import base64
import logging

import pytest

from keyset_paging.core.pagination import (
    CursorArityMismatch,
    CursorCodec,
    InvalidCursorFormat,
    InvalidPagingArguments,
    KeysetPaginator,
    PagingArguments,
    QueryKind,
    SequenceSource,
    SortDirection,
    SortField,
    SortSpecification,
    paginate,
)
from keyset_paging.core.settings import PaginationSettings
from tests.models import Brand


@pytest.fixture
def source(brands) -> SequenceSource[Brand]:
    return SequenceSource(brands)


@pytest.fixture
def paginator(settings, recorder) -> KeysetPaginator:
    return KeysetPaginator(settings, observer=recorder)


class TestForwardPaging:
    """Tests for first/after."""

    async def test_first_page(self, paginator, source, name_sort, sorted_brands, recorder):
        page = await paginator.paginate(source, name_sort, PagingArguments(first=5))

        assert list(page.items) == sorted_brands[:5]
        assert page.has_next_page is True
        assert page.has_previous_page is False
        assert page.first == sorted_brands[0]
        assert page.last == sorted_brands[4]
        assert [q.kind for q in recorder.queries] == [QueryKind.FETCH]
        assert recorder.queries[0].limit == 6

    async def test_first_after_cursor(self, paginator, source, name_sort, sorted_brands, recorder):
        after = paginator.codec.encode(name_sort.key_of(sorted_brands[12]))

        page = await paginator.paginate(source, name_sort, PagingArguments(first=5, after=after))

        assert list(page.items) == sorted_brands[13:18]
        assert page.has_previous_page is True
        assert page.has_next_page is True
        assert len(recorder.of_kind(QueryKind.EXISTS)) == 1

    @pytest.mark.parametrize(("first", "has_next"), [(100, False), (99, True), (1, True)])
    async def test_has_next_at_boundary(self, paginator, source, name_sort, first, has_next):
        page = await paginator.paginate(source, name_sort, PagingArguments(first=first))

        assert len(page) == first
        assert page.has_next_page is has_next

    async def test_first_is_capped_by_remaining(self, paginator, source, name_sort, sorted_brands):
        after = paginator.codec.encode(name_sort.key_of(sorted_brands[96]))

        page = await paginator.paginate(source, name_sort, PagingArguments(first=10, after=after))

        assert list(page.items) == sorted_brands[97:]
        assert page.has_next_page is False
        assert page.has_previous_page is True

    async def test_walk_forward_visits_every_item_once(self, paginator, source, name_sort, sorted_brands):
        seen: list[Brand] = []
        args = PagingArguments(first=7)
        pages = 0
        while True:
            page = await paginator.paginate(source, name_sort, args)
            seen.extend(page.items)
            pages += 1
            if not page.has_next_page:
                break
            args = args.with_cursor(after=page.create_cursor(page.last))

        assert seen == sorted_brands
        assert pages == 15


class TestBackwardPaging:
    """Tests for last/before."""

    async def test_last_page(self, paginator, source, name_sort, sorted_brands, recorder):
        page = await paginator.paginate(source, name_sort, PagingArguments(last=5))

        assert list(page.items) == sorted_brands[-5:]
        assert page.has_previous_page is True
        assert page.has_next_page is False
        (query,) = recorder.queries
        assert all(f.direction is SortDirection.DESC for f in query.sort)

    async def test_last_before_cursor(self, paginator, source, name_sort, sorted_brands):
        before = paginator.codec.encode(name_sort.key_of(sorted_brands[50]))

        page = await paginator.paginate(source, name_sort, PagingArguments(last=5, before=before))

        assert list(page.items) == sorted_brands[45:50]
        assert page.has_next_page is True
        assert page.has_previous_page is True

    async def test_last_before_near_start(self, paginator, source, name_sort, sorted_brands):
        before = paginator.codec.encode(name_sort.key_of(sorted_brands[3]))

        page = await paginator.paginate(source, name_sort, PagingArguments(last=5, before=before))

        assert list(page.items) == sorted_brands[:3]
        assert page.has_previous_page is False
        assert page.has_next_page is True

    async def test_walk_backward_visits_every_item_once(self, paginator, source, name_sort, sorted_brands):
        seen: list[Brand] = []
        args = PagingArguments(last=9)
        while True:
            page = await paginator.paginate(source, name_sort, args)
            seen[:0] = page.items
            if not page.has_previous_page:
                break
            args = args.with_cursor(before=page.start_cursor)

        assert seen == sorted_brands


class TestRangeAndCombinedArguments:
    """Tests for cursors on both sides and first+last together."""

    async def test_after_and_before(self, paginator, source, name_sort, sorted_brands):
        args = PagingArguments(
            first=50,
            after=paginator.codec.encode(name_sort.key_of(sorted_brands[10])),
            before=paginator.codec.encode(name_sort.key_of(sorted_brands[20])),
        )

        page = await paginator.paginate(source, name_sort, args)

        assert list(page.items) == sorted_brands[11:20]
        assert page.has_previous_page is True
        assert page.has_next_page is True

    async def test_first_and_last_keeps_tail_of_slice(self, paginator, source, name_sort, sorted_brands):
        page = await paginator.paginate(source, name_sort, PagingArguments(first=10, last=3))

        assert list(page.items) == sorted_brands[7:10]
        assert page.has_next_page is True
        assert page.has_previous_page is True

    async def test_first_and_larger_last(self, paginator, source, name_sort, sorted_brands):
        page = await paginator.paginate(source, name_sort, PagingArguments(first=4, last=10))

        assert list(page.items) == sorted_brands[:4]
        assert page.has_previous_page is False


class TestEdgeCases:
    """Tests for empty sources, zero counts and defaults."""

    async def test_empty_source(self, paginator, name_sort):
        page = await paginator.paginate(SequenceSource([]), name_sort, PagingArguments(first=5))

        assert page.items == ()
        assert page.has_next_page is False
        assert page.has_previous_page is False
        assert page.first is None
        assert page.last is None
        assert page.start_cursor is None
        assert page.end_cursor is None

    async def test_first_zero(self, paginator, source, name_sort):
        page = await paginator.paginate(source, name_sort, PagingArguments(first=0))

        assert page.items == ()
        assert page.has_next_page is True
        assert page.has_previous_page is False

    async def test_last_zero_on_empty_source(self, paginator, name_sort):
        page = await paginator.paginate(SequenceSource([]), name_sort, PagingArguments(last=0))

        assert page.items == ()
        assert page.has_previous_page is False

    async def test_no_count_returns_everything(self, paginator, source, name_sort, sorted_brands):
        page = await paginator.paginate(source, name_sort, PagingArguments())

        assert list(page.items) == sorted_brands
        assert page.has_next_page is False

    async def test_default_page_size(self, source, name_sort, sorted_brands):
        paginator = KeysetPaginator(PaginationSettings(default_page_size=10, _env_file=None))

        page = await paginator.paginate(source, name_sort, PagingArguments())

        assert list(page.items) == sorted_brands[:10]
        assert page.has_next_page is True

    async def test_duplicate_leading_values_use_tie_breaker(self, paginator):
        items = [Brand(id=i, name="same") for i in (5, 3, 9, 1, 7)]
        sort = SortSpecification.of(SortField("name"), SortField("id", unique=True))

        first = await paginator.paginate(SequenceSource(items), sort, PagingArguments(first=2))
        second = await paginator.paginate(
            SequenceSource(items),
            sort,
            PagingArguments(first=2, after=first.end_cursor),
        )

        assert [b.id for b in first] == [1, 3]
        assert [b.id for b in second] == [5, 7]

    async def test_descending_with_nulls(self, paginator, source, brands):
        sort = SortSpecification.of(
            SortField("country", SortDirection.DESC),
            SortField("id", unique=True),
        )
        with_country = sorted((b for b in brands if b.country is not None), key=lambda b: b.id)
        with_country.sort(key=lambda b: b.country, reverse=True)
        expected = with_country + sorted((b for b in brands if b.country is None), key=lambda b: b.id)

        seen: list[Brand] = []
        args = PagingArguments(first=9)
        while True:
            page = await paginator.paginate(source, sort, args)
            seen.extend(page.items)
            if not page.has_next_page:
                break
            args = args.with_cursor(after=page.end_cursor)

        assert seen == expected

    async def test_same_arguments_same_page(self, paginator, source, name_sort, sorted_brands):
        args = PagingArguments(
            first=5, after=paginator.codec.encode(name_sort.key_of(sorted_brands[40]))
        )

        assert await paginator.paginate(source, name_sort, args) == await paginator.paginate(
            source, name_sort, args
        )


class TestValidation:
    """Tests for InvalidPagingArguments."""

    @pytest.mark.parametrize(
        ("args", "argument"),
        [
            (PagingArguments(first=-1), "first"),
            (PagingArguments(last=-1), "last"),
            (PagingArguments(first=101), "first"),
            (PagingArguments(first=10, last=101), "last"),
        ],
    )
    async def test_rejects_counts(self, paginator, source, name_sort, recorder, args, argument):
        with pytest.raises(InvalidPagingArguments) as exc_info:
            await paginator.paginate(source, name_sort, args)

        assert exc_info.value.argument == argument
        assert recorder.queries == []

    async def test_garbage_cursor(self, paginator, source, name_sort, recorder):
        with pytest.raises(InvalidPagingArguments) as exc_info:
            await paginator.paginate(source, name_sort, PagingArguments(first=5, after="garbage"))

        assert exc_info.value.argument == "after"
        assert exc_info.value.cursor == "garbage"
        assert isinstance(exc_info.value.__cause__, InvalidCursorFormat)
        assert recorder.queries == []

    async def test_cursor_for_other_sort(self, paginator, source, name_sort):
        before = CursorCodec().encode(("Brand:1",))

        with pytest.raises(InvalidPagingArguments) as exc_info:
            await paginator.paginate(source, name_sort, PagingArguments(last=5, before=before))

        assert exc_info.value.argument == "before"
        assert isinstance(exc_info.value.__cause__, CursorArityMismatch)


    async def test_cursor_value_overflow(self, paginator, source, name_sort):
        after = base64.urlsafe_b64encode(b'[["f","0x1p99999"],["i","0x1"]]').decode().rstrip("=")

        with pytest.raises(InvalidPagingArguments) as exc_info:
            await paginator.paginate(source, name_sort, PagingArguments(first=5, after=after))

        assert exc_info.value.argument == "after"
        assert isinstance(exc_info.value.__cause__, InvalidCursorFormat)

    async def test_cursor_with_wrong_value_types(self, paginator, source, recorder):
        sort = SortSpecification.of(
            SortField("name", value_type=str),
            SortField("id", unique=True, value_type=int),
        )
        after = CursorCodec().encode((123, "x"))

        with pytest.raises(InvalidPagingArguments, match="name cannot hold int") as exc_info:
            await paginator.paginate(source, sort, PagingArguments(first=5, after=after))

        assert exc_info.value.cursor == after
        assert recorder.queries == []

    async def test_null_cursor_value_fits_typed_field(self, paginator, source):
        sort = SortSpecification.of(
            SortField("country", value_type=str),
            SortField("id", unique=True, value_type=int),
        )
        after = CursorCodec().encode((None, 3))

        page = await paginator.paginate(source, sort, PagingArguments(first=2, after=after))

        assert page.has_previous_page is True


class TestTotalCountAndSigning:
    """Tests for include_total_count and signed cursors."""

    async def test_total_count_ignores_cursors(self, paginator, source, name_sort, sorted_brands, recorder):
        after = paginator.codec.encode(name_sort.key_of(sorted_brands[50]))

        page = await paginator.paginate(
            source, name_sort, PagingArguments(first=5, after=after, include_total_count=True)
        )

        assert page.total_count == 100
        assert len(recorder.of_kind(QueryKind.COUNT)) == 1

    async def test_total_count_absent_by_default(self, paginator, source, name_sort):
        page = await paginator.paginate(source, name_sort, PagingArguments(first=5))

        assert page.total_count is None

    async def test_signed_cursors_from_settings(self, source, name_sort, sorted_brands):
        settings = PaginationSettings(cursor_secret="s3cret", _env_file=None)
        paginator = KeysetPaginator(settings)

        page = await paginator.paginate(source, name_sort, PagingArguments(first=5))
        following = await paginator.paginate(
            source, name_sort, PagingArguments(first=5, after=page.end_cursor)
        )

        assert paginator.codec.signed
        assert list(following.items) == sorted_brands[5:10]
        with pytest.raises(InvalidPagingArguments):
            await paginator.paginate(
                source,
                name_sort,
                PagingArguments(first=5, after=CursorCodec().encode(name_sort.key_of(sorted_brands[4]))),
            )


class TestObservation:
    """Tests for observer error isolation and the module-level helper."""

    async def test_failing_observer_does_not_fail_page(self, settings, source, name_sort, caplog):
        def explode(query):
            raise RuntimeError("observer down")

        with caplog.at_level(logging.WARNING, logger="keyset_paging.core.pagination.observers"):
            page = await KeysetPaginator(settings, observer=explode).paginate(
                source, name_sort, PagingArguments(first=3)
            )

        assert len(page) == 3
        assert any(getattr(r, "operation", None) == "pagination.observe" for r in caplog.records)

    async def test_fetch_errors_propagate(self, paginator, name_sort):
        class BrokenSource(SequenceSource[Brand]):
            async def fetch(self, query):
                raise ConnectionError("database unavailable")

        with pytest.raises(ConnectionError):
            await paginator.paginate(BrokenSource([]), name_sort, PagingArguments(first=1))

    async def test_module_level_paginate(self, settings, source, name_sort, sorted_brands, recorder):
        page = await paginate(source, name_sort, PagingArguments(first=2), settings=settings, observer=recorder)

        assert list(page.items) == sorted_brands[:2]
        assert len(recorder.queries) == 1

    async def test_log_queries_installs_logging_observer(self, source, name_sort, caplog):
        paginator = KeysetPaginator(PaginationSettings(log_queries=True, _env_file=None))

        with caplog.at_level(logging.DEBUG, logger="keyset_paging.queries"):
            await paginator.paginate(source, name_sort, PagingArguments(first=1))

        assert any("pagination.query: fetch" in r.getMessage() for r in caplog.records)

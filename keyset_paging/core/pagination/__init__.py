"""Cursor-based (keyset) pagination.

Keyset pagination is:
- Stable: pages don't shift when rows are inserted or deleted between requests
- Performant: uses indexed seeks instead of OFFSET scans
- Symmetric: ``first``/``after`` and ``last``/``before`` behave as mirror images

Single page:
    sort = SortSpecification.of(Brand.name, Brand.id)
    page = await paginate(SqlAlchemySource(session, select(Brand)), sort, args)
    return page.to_connection()

One page per parent, one query:
    pages = await paginate_batch(
        SqlAlchemySource(session, select(Product).where(Product.brand_id.in_(ids))),
        Product.brand_id,
        SortSpecification.of(Product.name, Product.id),
        args,
    )

Cursors are opaque URL-safe strings that clients pass back unchanged.
"""

from keyset_paging.core.pagination.arguments import PagingArguments
from keyset_paging.core.pagination.batch import BatchPaginator, paginate_batch
from keyset_paging.core.pagination.cursor import CursorCodec
from keyset_paging.core.pagination.exceptions import (
    CursorArityMismatch,
    CursorEncodeError,
    InvalidCursorFormat,
    InvalidPagingArguments,
    InvalidSortSpecification,
    PaginationError,
)
from keyset_paging.core.pagination.filters import SeekFilter
from keyset_paging.core.pagination.observers import (
    LoggingQueryObserver,
    QueryObserver,
    QueryRecorder,
)
from keyset_paging.core.pagination.page import BatchPage, Page
from keyset_paging.core.pagination.paginator import KeysetPaginator, PagingPlan, paginate
from keyset_paging.core.pagination.query import FetchQuery, GroupSelector, KeyBound, QueryKind
from keyset_paging.core.pagination.schemas import Connection, CursorPage, Edge, PageInfo
from keyset_paging.core.pagination.sorting import SortDirection, SortField, SortSpecification
from keyset_paging.core.pagination.sources import PageSource, SequenceSource, SqlAlchemySource

__all__ = [
    # Paginators
    "BatchPaginator",
    "KeysetPaginator",
    "PagingPlan",
    "paginate",
    "paginate_batch",
    # Data model
    "BatchPage",
    "Page",
    "PagingArguments",
    "SortDirection",
    "SortField",
    "SortSpecification",
    # Cursor utilities
    "CursorCodec",
    # Fetch capability
    "FetchQuery",
    "GroupSelector",
    "KeyBound",
    "PageSource",
    "QueryKind",
    "SeekFilter",
    "SequenceSource",
    "SqlAlchemySource",
    # Observation
    "LoggingQueryObserver",
    "QueryObserver",
    "QueryRecorder",
    # Schemas
    "Connection",
    "CursorPage",
    "Edge",
    "PageInfo",
    # Errors
    "CursorArityMismatch",
    "CursorEncodeError",
    "InvalidCursorFormat",
    "InvalidPagingArguments",
    "InvalidSortSpecification",
    "PaginationError",
]

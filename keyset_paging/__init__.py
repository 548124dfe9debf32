"""Keyset pagination for ordered data sources.

Re-exports the public pagination API:

    from keyset_paging import PagingArguments, SortSpecification, paginate
"""

from keyset_paging.core.pagination import (
    BatchPage,
    BatchPaginator,
    CursorCodec,
    InvalidPagingArguments,
    KeysetPaginator,
    Page,
    PagingArguments,
    SequenceSource,
    SortDirection,
    SortField,
    SortSpecification,
    SqlAlchemySource,
    paginate,
    paginate_batch,
)

__version__ = "0.1.0"

__all__ = [
    "BatchPage",
    "BatchPaginator",
    "CursorCodec",
    "InvalidPagingArguments",
    "KeysetPaginator",
    "Page",
    "PagingArguments",
    "SequenceSource",
    "SortDirection",
    "SortField",
    "SortSpecification",
    "SqlAlchemySource",
    "__version__",
    "paginate",
    "paginate_batch",
]

"""GraphQL integration: relay paging input/output types and paged DataLoaders."""

from keyset_paging.features.graphql.dataloaders import PagedDataLoader
from keyset_paging.features.graphql.types import PageInfoType, PagingInput

__all__ = ["PageInfoType", "PagedDataLoader", "PagingInput"]

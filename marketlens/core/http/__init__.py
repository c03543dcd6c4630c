"""HTTP access to upstream sources."""

from marketlens.core.http.client import RawDocument, SourceClient, SourceDescriptor
from marketlens.core.http.rate_limit import TokenBucket

__all__ = ["RawDocument", "SourceClient", "SourceDescriptor", "TokenBucket"]

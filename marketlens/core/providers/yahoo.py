"""Yahoo Finance quote pages."""

from collections.abc import Iterable

from loguru import logger

from marketlens.core.extraction import EmbeddedValueExtractor
from marketlens.core.http import RawDocument
from marketlens.core.models import FieldSignature, Snapshot, json_field
from marketlens.core.providers.base import DataProvider
from marketlens.core.services.fallback import SubstituteDescriptor

QUOTE_URL = "https://finance.yahoo.com/quote/{symbol}"


class YahooQuoteProvider(DataProvider):
    """Fetch quote pages and extract values embedded in them."""

    name = "yahoo_finance"

    def __init__(self, client, sources=None, extractor: EmbeddedValueExtractor | None = None):
        super().__init__(client, sources)
        self.extractor = extractor or EmbeddedValueExtractor()

    async def fetch_quote(self, symbol: str, timeout: float | None = None) -> RawDocument:
        symbol = symbol.upper()
        descriptor = self.descriptor(
            QUOTE_URL.format(symbol=symbol),
            params={"p": symbol},
            headers={"User-Agent": self.sources.yahoo_user_agent},
            timeout=timeout or self.sources.page_timeout,
        )
        return await self.fetch(descriptor)

    def extract(self, document: RawDocument, signatures: Iterable[FieldSignature], symbol: str | None = None) -> Snapshot:
        snapshot = self.extractor.extract(document, signatures, symbol=symbol.upper() if symbol else None)
        logger.bind(provider=self.name).debug(f"Extracted {len(snapshot)} fields for {symbol or document.url}")
        return snapshot

    async def quote_snapshot(
        self, symbol: str, signatures: Iterable[FieldSignature], timeout: float | None = None
    ) -> Snapshot:
        """Fetch the quote page of ``symbol`` and extract ``signatures``."""
        document = await self.fetch_quote(symbol, timeout)
        return self.extract(document, signatures, symbol)

    async def fetch_substitute(self, substitute: SubstituteDescriptor) -> float | None:
        """Value of ``substitute.field`` on the substitute symbol's quote page."""
        snapshot = await self.quote_snapshot(
            substitute.symbol, (json_field(substitute.field),), timeout=self.sources.batch_page_timeout
        )
        value = snapshot.primitive(substitute.field)
        return float(value) if isinstance(value, int | float) and not isinstance(value, bool) else None

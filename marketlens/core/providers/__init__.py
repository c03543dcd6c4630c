"""Upstream data providers."""

from marketlens.core.providers.base import DataProvider
from marketlens.core.providers.fred import FredProvider
from marketlens.core.providers.news import YahooNewsProvider
from marketlens.core.providers.stockanalysis import StockAnalysisProvider
from marketlens.core.providers.yahoo import YahooQuoteProvider

__all__ = ["DataProvider", "FredProvider", "StockAnalysisProvider", "YahooNewsProvider", "YahooQuoteProvider"]

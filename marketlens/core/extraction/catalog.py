"""Declarative signature tables and static reference data.

Each table is an immutable tuple; the column maps translate snapshot keys to
canonical row columns.
"""

from types import MappingProxyType
from typing import NamedTuple

from marketlens.core.models import FieldSignature, ValueKind, dom_field, json_field

N = ValueKind.NUMBER
I = ValueKind.INTEGER  # noqa: E741
P = ValueKind.PERCENT
B = ValueKind.BOOLEAN
S = ValueKind.STRING
TS = ValueKind.TIMESTAMP


def _json(*fields: str, kind: ValueKind = N, scope: str | None = None) -> tuple[FieldSignature, ...]:
    return tuple(json_field(f, kind, scope) for f in fields)


# 公司概况
PROFILE_SIGNATURES = _json(
    "address1", "city", "state", "zip", "country", "phone", "website", "industry", "sector", "longBusinessSummary",
    kind=S,
) + (json_field("fullTimeEmployees", I),)

PROFILE_COLUMNS = MappingProxyType({
    "address": "address1",
    "city": "city",
    "state": "state",
    "zip": "zip",
    "country": "country",
    "phone": "phone",
    "website": "website",
    "industry": "industry",
    "sector": "sector",
    "long_business_summary": "longBusinessSummary",
    "full_time_employees": "fullTimeEmployees",
})

# 摘要: DOM读数优先, 内嵌JSON兜底
SUMMARY_SIGNATURES = (
    tuple(
        dom_field(f, match_symbol=True)
        for f in ("marketCap", "trailingPE", "forwardPE", "beta", "enterpriseValue", "sharesOutstanding", "pegRatio")
    )
    + (dom_field("trailingEps"), dom_field("forwardEps"))
    + _json(
        "marketCap", "trailingPE", "enterpriseValue", "sharesOutstanding", "beta", "forwardPE", "trailingEps",
        "forwardEps", "pegRatio", "enterpriseToEbitda", "enterpriseToRevenue",
    )
    + (json_field("currency", S),)
)

SUMMARY_COLUMNS = MappingProxyType({
    "market_cap": "marketCap",
    "enterprise_value": "enterpriseValue",
    "shares_outstanding": "sharesOutstanding",
    "beta": "beta",
    "trailing_pe": "trailingPE",
    "forward_pe": "forwardPE",
    "trailing_eps": "trailingEps",
    "forward_eps": "forwardEps",
    "enterprise_to_ebitda": "enterpriseToEbitda",
    "enterprise_to_revenue": "enterpriseToRevenue",
    "peg_ratio": "pegRatio",
})

ESTIMATE_SIGNATURES = _json(
    "earningsAverage", "earningsHigh", "earningsLow", "revenueAverage", "revenueHigh", "revenueLow",
    "targetMeanPrice", "targetHighPrice", "targetLowPrice", "recommendationMean",
) + (json_field("numberOfAnalystOpinions", I), json_field("currency", S))

ESTIMATE_COLUMNS = MappingProxyType({
    "earnings_estimate_avg": "earningsAverage",
    "earnings_estimate_high": "earningsHigh",
    "earnings_estimate_low": "earningsLow",
    "revenue_estimate_avg": "revenueAverage",
    "revenue_estimate_high": "revenueHigh",
    "revenue_estimate_low": "revenueLow",
    "price_target_mean": "targetMeanPrice",
    "price_target_high": "targetHighPrice",
    "price_target_low": "targetLowPrice",
    "recommendation_mean": "recommendationMean",
    "analyst_count": "numberOfAnalystOpinions",
})

PRICING_SIGNATURES = (
    _json(
        "currentPrice", "previousClose", "open", "dayLow", "dayHigh", "regularMarketPrice",
        "regularMarketChange", "preMarketPrice", "preMarketChange", "postMarketPrice", "postMarketChange",
        "fiftyTwoWeekLow", "fiftyTwoWeekHigh", "fiftyDayAverage", "twoHundredDayAverage", "bid", "ask",
    )
    + _json("regularMarketChangePercent", "preMarketChangePercent", "postMarketChangePercent", kind=P)
    + _json("volume", "averageVolume", "averageDailyVolume10Day", "bidSize", "askSize", kind=I)
    + _json("marketState", "currency", kind=S)
)

PRICING_COLUMNS = MappingProxyType({
    "previous_close": "previousClose",
    "open_price": "open",
    "day_low": "dayLow",
    "day_high": "dayHigh",
    "regular_market_change": "regularMarketChange",
    "regular_market_change_percent": "regularMarketChangePercent",
    "pre_market_price": "preMarketPrice",
    "pre_market_change": "preMarketChange",
    "pre_market_change_percent": "preMarketChangePercent",
    "post_market_price": "postMarketPrice",
    "post_market_change": "postMarketChange",
    "post_market_change_percent": "postMarketChangePercent",
    "volume": "volume",
    "average_volume": "averageVolume",
    "average_volume_10day": "averageDailyVolume10Day",
    "fifty_two_week_low": "fiftyTwoWeekLow",
    "fifty_two_week_high": "fiftyTwoWeekHigh",
    "fifty_day_average": "fiftyDayAverage",
    "two_hundred_day_average": "twoHundredDayAverage",
    "bid_price": "bid",
    "ask_price": "ask",
    "bid_size": "bidSize",
    "ask_size": "askSize",
})

FINANCIAL_SIGNATURES = _json(
    "totalCash", "totalCashPerShare", "totalDebt", "debtToEquity", "totalRevenue", "revenuePerShare",
    "grossProfits", "ebitda", "freeCashflow", "operatingCashflow", "quickRatio", "currentRatio",
) + _json(
    "returnOnAssets", "returnOnEquity", "earningsGrowth", "revenueGrowth", "grossMargins", "ebitdaMargins",
    "operatingMargins", "profitMargins",
    kind=P,
) + (json_field("financialCurrency", S), json_field("currency", S))

FINANCIAL_COLUMNS = MappingProxyType({
    "total_cash": "totalCash",
    "total_cash_per_share": "totalCashPerShare",
    "total_debt": "totalDebt",
    "debt_to_equity": "debtToEquity",
    "total_revenue": "totalRevenue",
    "revenue_per_share": "revenuePerShare",
    "gross_profits": "grossProfits",
    "ebitda": "ebitda",
    "return_on_assets": "returnOnAssets",
    "return_on_equity": "returnOnEquity",
    "free_cash_flow": "freeCashflow",
    "operating_cash_flow": "operatingCashflow",
    "earnings_growth": "earningsGrowth",
    "revenue_growth": "revenueGrowth",
    "gross_margins": "grossMargins",
    "ebitda_margins": "ebitdaMargins",
    "operating_margins": "operatingMargins",
    "profit_margins": "profitMargins",
    "quick_ratio": "quickRatio",
    "current_ratio": "currentRatio",
})

DIVIDEND_SIGNATURES = (
    (json_field("dividendRate", N), json_field("dividendYield", P), json_field("exDividendDate", TS))
    + (json_field("payoutRatio", P), json_field("fiveYearAvgDividendYield", N), json_field("lastDividendValue", N))
    + (json_field("lastDividendDate", TS),)
)

DIVIDEND_COLUMNS = MappingProxyType({
    "dividend_rate": "dividendRate",
    "dividend_yield": "dividendYield",
    "ex_dividend_date": "exDividendDate",
    "payout_ratio": "payoutRatio",
    "five_year_avg_yield": "fiveYearAvgDividendYield",
    "last_dividend_value": "lastDividendValue",
    "last_dividend_date": "lastDividendDate",
})

TECHNICAL_SIGNATURES = _json("fiftyDayAverage", "twoHundredDayAverage", "fiftyTwoWeekLow", "fiftyTwoWeekHigh", "beta") + _json(
    "averageVolume", "averageVolume10days", "regularMarketVolume", kind=I
)

TECHNICAL_COLUMNS = MappingProxyType({
    "fifty_day_ma": "fiftyDayAverage",
    "two_hundred_day_ma": "twoHundredDayAverage",
    "fifty_two_week_low": "fiftyTwoWeekLow",
    "fifty_two_week_high": "fiftyTwoWeekHigh",
    "beta": "beta",
    "average_volume": "averageVolume",
    "average_volume_10d": "averageVolume10days",
    "current_volume": "regularMarketVolume",
})

ESG_SCOPE = "esgScores"

ESG_SIGNATURES = _json(
    "totalEsg", "environmentScore", "socialScore", "governanceScore", "peer", "percentile",
    scope=ESG_SCOPE,
) + _json(
    "adult", "alcoholic", "animalTesting", "catholicValues", "controversialWeapons", "gambling", "gmo",
    "militaryContract", "nuclear", "pesticides", "palmOil", "coal", "tobacco",
    kind=B,
    scope=ESG_SCOPE,
)

ESG_SCORE_COLUMNS = MappingProxyType({
    "total_esg_score": "totalEsg",
    "environment_score": "environmentScore",
    "social_score": "socialScore",
    "governance_score": "governanceScore",
    "peer_average": "peer",
    "percentile": "percentile",
})

ESG_FLAG_COLUMNS = MappingProxyType({
    "adult_content": "adult",
    "alcoholic_beverages": "alcoholic",
    "animal_testing": "animalTesting",
    "catholic_values": "catholicValues",
    "controversial_weapons": "controversialWeapons",
    "gambling": "gambling",
    "gmo": "gmo",
    "military_contract": "militaryContract",
    "nuclear": "nuclear",
    "pesticides": "pesticides",
    "palm_oil": "palmOil",
    "coal": "coal",
    "tobacco": "tobacco",
})

PEER_CONTEXT_SIGNATURES = _json("industry", "sector", kind=S)

PEER_METRIC_SIGNATURES = _json(
    "marketCap", "trailingPE", "forwardPE", "pegRatio", "priceToBook", "enterpriseValue"
) + _json("revenueGrowth", "earningsGrowth", kind=P)

PEER_METRIC_COLUMNS = MappingProxyType({
    "market_cap": "marketCap",
    "trailing_pe": "trailingPE",
    "forward_pe": "forwardPE",
    "peg_ratio": "pegRatio",
    "price_to_book": "priceToBook",
    "enterprise_value": "enterpriseValue",
    "revenue_growth": "revenueGrowth",
    "earnings_growth": "earningsGrowth",
})

INDEX_SIGNATURES = _json("regularMarketPrice", "regularMarketChange", "marketCap") + (
    json_field("regularMarketChangePercent", P),
    json_field("regularMarketVolume", I),
)

INDEX_COLUMNS = MappingProxyType({
    "price": "regularMarketPrice",
    "change": "regularMarketChange",
    "change_percent": "regularMarketChangePercent",
    "volume": "regularMarketVolume",
    "market_cap": "marketCap",
})

SCREEN_SIGNATURES = _json(
    "regularMarketPrice", "marketCap", "trailingPE", "forwardPE", "pegRatio", "priceToBook", "debtToEquity", "beta"
) + _json("dividendYield", "revenueGrowth", "earningsGrowth", "profitMargins", "returnOnEquity", kind=P) + _json(
    "regularMarketVolume", "averageVolume", kind=I
) + _json("longName", "sector", kind=S)

SCREEN_COLUMNS = MappingProxyType({
    "sector": "sector",
    "price": "regularMarketPrice",
    "market_cap": "marketCap",
    "trailing_pe": "trailingPE",
    "forward_pe": "forwardPE",
    "peg_ratio": "pegRatio",
    "price_to_book": "priceToBook",
    "dividend_yield": "dividendYield",
    "revenue_growth": "revenueGrowth",
    "earnings_growth": "earningsGrowth",
    "profit_margins": "profitMargins",
    "return_on_equity": "returnOnEquity",
    "debt_to_equity": "debtToEquity",
    "beta": "beta",
    "volume": "regularMarketVolume",
    "average_volume": "averageVolume",
})

CORRELATION_SIGNATURES = _json(
    "regularMarketPrice", "regularMarketChange", "beta", "fiftyTwoWeekLow", "fiftyTwoWeekHigh"
) + (json_field("regularMarketChangePercent", P), json_field("regularMarketVolume", I))


# 指数与行业ETF: key -> (symbol, 名称)
MARKET_INDICES = MappingProxyType({
    "SP500": ("^GSPC", "S&P 500"),
    "NASDAQ": ("^IXIC", "NASDAQ Composite"),
    "DOW": ("^DJI", "Dow Jones Industrial Average"),
    "VIX": ("^VIX", "CBOE Volatility Index"),
    "RUSSELL2000": ("^RUT", "Russell 2000"),
    "TECH": ("XLK", "Technology Sector SPDR"),
    "FINANCIALS": ("XLF", "Financial Sector SPDR"),
    "HEALTHCARE": ("XLV", "Healthcare Sector SPDR"),
    "ENERGY": ("XLE", "Energy Sector SPDR"),
    "CONSUMER": ("XLY", "Consumer Discretionary SPDR"),
})

SCREENER_UNIVERSE = (
    "AAPL", "MSFT", "GOOGL", "AMZN", "NVDA", "META", "TSLA", "BRK-B", "LLY", "AVGO",
    "JPM", "V", "UNH", "JNJ", "WMT", "XOM", "MA", "PG", "HD", "CVX",
    "NFLX", "ADBE", "CRM", "ORCL", "INTC", "AMD", "QCOM", "CSCO", "TXN", "AMAT",
    "BAC", "WFC", "GS", "MS", "C", "AXP", "SCHW", "BLK", "SPGI", "CME",
    "PFE", "ABBV", "TMO", "ABT", "DHR", "MRK", "BMY", "MDT", "AMGN", "GILD",
    "KO", "PEP", "NKE", "MCD", "SBUX", "TGT", "COST", "LOW", "DIS", "PYPL",
    "BA", "CAT", "MMM", "HON", "RTX", "UPS", "FDX", "GE", "DE", "LMT",
)

PEER_MAP = MappingProxyType({
    "AAPL": ("MSFT", "GOOGL", "AMZN", "META"),
    "MSFT": ("AAPL", "GOOGL", "AMZN", "META"),
    "GOOGL": ("AAPL", "MSFT", "AMZN", "META"),
    "META": ("AAPL", "MSFT", "GOOGL", "AMZN"),
    "TSLA": ("NIO", "RIVN", "F", "GM"),
    "F": ("GM", "TSLA", "RIVN", "NIO"),
    "GM": ("F", "TSLA", "RIVN", "NIO"),
    "NVDA": ("AMD", "INTC", "QCOM", "AVGO"),
    "AMD": ("NVDA", "INTC", "QCOM", "AVGO"),
    "INTC": ("NVDA", "AMD", "QCOM", "AVGO"),
    "JPM": ("BAC", "WFC", "C", "GS"),
    "BAC": ("JPM", "WFC", "C", "GS"),
    "JNJ": ("PFE", "MRK", "ABBV", "UNH"),
    "PFE": ("JNJ", "MRK", "ABBV", "UNH"),
    "WMT": ("TGT", "COST", "HD", "LOW"),
    "AMZN": ("WMT", "TGT", "COST", "EBAY"),
})

# 行业关键词 -> 默认同业, 按顺序匹配
INDUSTRY_PEERS = (
    (("auto",), ("F", "GM", "HMC", "TM")),
    (("tech", "software"), ("AAPL", "MSFT", "GOOGL", "META")),
    (("bank", "financial"), ("JPM", "BAC", "WFC", "C")),
    (("health", "pharma"), ("JNJ", "PFE", "MRK", "UNH")),
)
DEFAULT_PEERS = ("AAPL", "MSFT", "AMZN", "GOOGL")
MAX_PEERS = 4


def peers_for(symbol: str, industry: str | None) -> tuple[str, ...]:
    """Peer symbols for ``symbol``, excluding itself, at most :data:`MAX_PEERS`."""
    symbol = symbol.upper()
    candidates = PEER_MAP.get(symbol)
    if candidates is None:
        text = (industry or "").lower()
        candidates = next((peers for words, peers in INDUSTRY_PEERS if any(w in text for w in words)), DEFAULT_PEERS)
    return tuple(p for p in candidates if p != symbol)[:MAX_PEERS]


class Indicator(NamedTuple):
    """FRED economic indicator."""

    key: str
    series_id: str
    name: str
    unit: str


ECONOMIC_INDICATORS: tuple[Indicator, ...] = (
    # GDP
    Indicator("gdp", "GDP", "Gross Domestic Product", "Billions of Dollars"),
    Indicator("realGdp", "GDPC1", "Real GDP", "Billions of Chained 2017 Dollars"),
    Indicator("gdpGrowth", "A191RL1Q225SBEA", "Real GDP Growth Rate", "Percent"),
    # 劳动力市场
    Indicator("unemployment", "UNRATE", "Unemployment Rate", "Percent"),
    Indicator("employment", "PAYEMS", "Nonfarm Payrolls", "Thousands of Persons"),
    Indicator("laborForce", "CIVPART", "Labor Force Participation Rate", "Percent"),
    Indicator("jobsOpenings", "JTSJOL", "Job Openings", "Thousands"),
    # 通胀
    Indicator("inflation", "CPIAUCSL", "Consumer Price Index", "Index 1982-1984=100"),
    Indicator("coreCpi", "CPILFESL", "Core CPI (ex food & energy)", "Index 1982-1984=100"),
    Indicator("pce", "PCEPI", "PCE Price Index", "Index 2012=100"),
    Indicator("corePce", "PCEPILFE", "Core PCE Price Index", "Index 2012=100"),
    Indicator("producerPrices", "PPIACO", "Producer Price Index", "Index 1982=100"),
    # 利率
    Indicator("federalFunds", "FEDFUNDS", "Federal Funds Rate", "Percent"),
    Indicator("treasury1m", "DGS1MO", "1-Month Treasury Rate", "Percent"),
    Indicator("treasury3m", "DGS3MO", "3-Month Treasury Rate", "Percent"),
    Indicator("treasury6m", "DGS6MO", "6-Month Treasury Rate", "Percent"),
    Indicator("treasury1y", "DGS1", "1-Year Treasury Rate", "Percent"),
    Indicator("treasury2y", "DGS2", "2-Year Treasury Rate", "Percent"),
    Indicator("treasury5y", "DGS5", "5-Year Treasury Rate", "Percent"),
    Indicator("treasury10y", "DGS10", "10-Year Treasury Rate", "Percent"),
    Indicator("treasury30y", "DGS30", "30-Year Treasury Rate", "Percent"),
    # 货币供应
    Indicator("m1Money", "M1SL", "M1 Money Supply", "Billions of Dollars"),
    Indicator("m2Money", "M2SL", "M2 Money Supply", "Billions of Dollars"),
    # 消费与工业
    Indicator("retailSales", "RSAFS", "Retail Sales", "Millions of Dollars"),
    Indicator("consumerSentiment", "UMCSENT", "Consumer Sentiment", "Index 1966:Q1=100"),
    Indicator("industrialProduction", "INDPRO", "Industrial Production Index", "Index 2017=100"),
    # 住房
    Indicator("housingStarts", "HOUST", "Housing Starts", "Thousands of Units"),
    Indicator("newHomeSales", "HSN1F", "New Home Sales", "Thousands of Units"),
    Indicator("existingHomeSales", "EXHOSLUSM495S", "Existing Home Sales", "Millions"),
    # 金融市场
    Indicator("vix", "VIXCLS", "VIX Volatility Index", "Index"),
    Indicator("sp500", "SP500", "S&P 500 Index", "Index"),
    # 贸易与债务
    Indicator("tradeBalance", "BOPGSTB", "Trade Balance", "Millions of Dollars"),
    Indicator("federalDebt", "GFDEBTN", "Federal Debt Total", "Millions of Dollars"),
    Indicator("debtToGdp", "GFDEGDQ188S", "Federal Debt to GDP Ratio", "Percent"),
)

INDICATORS_BY_KEY = MappingProxyType({indicator.key: indicator for indicator in ECONOMIC_INDICATORS})

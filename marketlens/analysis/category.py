"""Market category and crypto symbol detection from the market question."""

import re
from typing import Optional

CATEGORY_CRYPTO = "crypto"
CATEGORY_POLITICS = "politics"
CATEGORY_SPORTS = "sports"
CATEGORY_FINANCE = "finance"
CATEGORY_TECHNOLOGY = "technology"
CATEGORY_GENERAL = "general"

# Checked in order; first match wins
CATEGORY_PATTERNS = [
    (
        CATEGORY_CRYPTO,
        re.compile(r"bitcoin|btc|ethereum|eth|crypto|token|blockchain|defi|nft", re.IGNORECASE),
    ),
    (
        CATEGORY_POLITICS,
        re.compile(
            r"election|president|vote|congress|senate|governor|political|trump|biden",
            re.IGNORECASE,
        ),
    ),
    (
        CATEGORY_SPORTS,
        re.compile(
            r"win|championship|match|game|team|player|score|league|cup|tournament"
            r"|sport|nba|nfl|fifa|olympic|world cup",
            re.IGNORECASE,
        ),
    ),
    (
        CATEGORY_FINANCE,
        re.compile(
            r"stock|market cap|company|revenue|profit|earnings|ipo|nasdaq|s&p",
            re.IGNORECASE,
        ),
    ),
    (
        CATEGORY_TECHNOLOGY,
        re.compile(
            r"ai|artificial intelligence|gpt|openai|model|technology|launch|release",
            re.IGNORECASE,
        ),
    ),
]

# Scanned in order; aliases resolve to their ticker
CRYPTO_SYMBOLS = [
    "BTC", "BITCOIN", "ETH", "ETHEREUM", "BNB", "SOL", "SOLANA",
    "XRP", "ADA", "CARDANO", "DOGE", "DOGECOIN", "MATIC", "DOT",
    "AVAX", "LINK", "UNI", "ATOM", "HYPE", "TRUMP", "PEPE", "SHIB",
]

SYMBOL_ALIASES = {
    "BITCOIN": "BTC",
    "ETHEREUM": "ETH",
    "SOLANA": "SOL",
    "CARDANO": "ADA",
    "DOGECOIN": "DOGE",
}

CATEGORY_DATA_REQUIREMENTS = {
    CATEGORY_CRYPTO: """REQUIRED DATA (only use if provided or widely known):
- Technical levels from the provided price data
- On-chain metrics only if explicitly provided
- Known historical patterns (halvings, major events)
- Publicly announced regulatory developments""",
    CATEGORY_SPORTS: """REQUIRED DATA (only use if widely verifiable):
- Official FIFA/league rankings and recent form
- Publicly known injury reports
- Head-to-head historical records
- Tournament seeding and bracket position""",
    CATEGORY_POLITICS: """REQUIRED DATA (only use if verifiable):
- Published poll aggregates with sources
- Historical voting patterns by state/region
- Publicly announced endorsements
- Official campaign developments""",
    CATEGORY_FINANCE: """REQUIRED DATA (only use if publicly available):
- Published financial metrics (P/E, revenue)
- Official analyst ratings
- Historical price performance
- Announced company developments""",
    CATEGORY_TECHNOLOGY: """REQUIRED DATA (only use if verifiable):
- Official product announcements
- Published development timelines
- Known competitive landscape
- Regulatory status""",
    CATEGORY_GENERAL: """REQUIRED DATA (only use if verifiable):
- Statistics from the provided market data
- Widely known historical precedents
- Verifiable public information""",
}


def detect_market_category(title: str) -> str:
    """Classify a market question by keyword matching.

    Args:
        title: Market question

    Returns:
        One of crypto, politics, sports, finance, technology or general
    """
    for category, pattern in CATEGORY_PATTERNS:
        if pattern.search(title):
            return category
    return CATEGORY_GENERAL


def extract_crypto_symbol(title: str) -> Optional[str]:
    """Extract the first known crypto ticker mentioned in a market question.

    Args:
        title: Market question

    Returns:
        Ticker such as "BTC", or None if no known symbol appears
    """
    upper_title = title.upper()
    for symbol in CRYPTO_SYMBOLS:
        if symbol in upper_title:
            return SYMBOL_ALIASES.get(symbol, symbol)
    return None


def category_data_requirements(category: str) -> str:
    """Get the data-requirements policy block for a category."""
    return CATEGORY_DATA_REQUIREMENTS.get(
        category, CATEGORY_DATA_REQUIREMENTS[CATEGORY_GENERAL]
    )

"""Suggestion lists for the add-trade form.

Entries are free text; these catalogs only drive auto-complete.
"""

DEFAULT_ENTRY = "XAUUSD"

# Metals first, then forex majors/minors/exotics, then crypto.
TRADING_PAIRS = (
    "XAUUSD",
    "XAGUSD",
    "XAUEUR",
    "EUR/USD",
    "GBP/USD",
    "USD/JPY",
    "USD/CHF",
    "AUD/USD",
    "USD/CAD",
    "NZD/USD",
    "EUR/GBP",
    "EUR/JPY",
    "GBP/JPY",
    "AUD/JPY",
    "EUR/AUD",
    "GBP/AUD",
    "EUR/CAD",
    "GBP/CAD",
    "AUD/CAD",
    "EUR/CHF",
    "GBP/CHF",
    "AUD/CHF",
    "EUR/NZD",
    "GBP/NZD",
    "USD/TRY",
    "USD/ZAR",
    "USD/MXN",
    "USD/SGD",
    "USD/HKD",
    "USD/SEK",
    "USD/NOK",
    "BTC/USD",
    "ETH/USD",
    "BNB/USD",
    "SOL/USD",
    "ADA/USD",
    "XRP/USD",
    "DOT/USD",
    "DOGE/USD",
    "MATIC/USD",
    "LTC/USD",
    "AVAX/USD",
    "LINK/USD",
    "UNI/USD",
    "BTC/USDT",
    "ETH/USDT",
    "BNB/USDT",
    "SOL/USDT",
)

TRADING_NOTES = (
    "Very Good",
    "Good",
    "Excellent",
    "Perfect",
    "Bad",
    "Poor",
    "Terrible",
    "Followed Plan",
    "Did Not Follow Plan",
    "Emotional Trade",
    "Revenge Trade",
    "FOMO Trade",
    "Overtrading",
    "Good Entry",
    "Bad Entry",
    "Good Exit",
    "Bad Exit",
    "Trend Following",
    "Counter Trend",
    "Range Trading",
    "Breakout",
    "Reversal",
    "High Volatility",
    "Low Volatility",
    "News Event",
    "Economic Data",
    "Technical Analysis",
    "Fundamental Analysis",
    "Price Action",
    "Support/Resistance",
    "Moving Average",
    "RSI Signal",
    "MACD Signal",
    "Fibonacci",
    "Cut Losses Early",
    "Let Winners Run",
    "Risk Management",
    "Position Sizing",
    "Timing Issue",
    "Patience Needed",
    "Discipline",
    "Greed",
    "Fear",
    "London Session",
    "New York Session",
    "Asian Session",
    "Overlap Session",
    "Scalping",
    "Day Trading",
    "Swing Trading",
    "Position Trading",
    "Requires Review",
    "Needs Improvement",
    "Well Executed",
    "Rushed Decision",
)


def suggest_entries(prefix: str, limit: int = 10) -> list[str]:
    """Catalog pairs containing *prefix*, case-insensitively, in catalog order."""
    needle = (prefix or "").strip().upper()
    if not needle:
        return list(TRADING_PAIRS[:limit])
    compact = needle.replace("/", "")
    matches = [p for p in TRADING_PAIRS if needle in p or compact in p.replace("/", "")]
    return matches[:limit]


def suggest_notes(text: str, limit: int = 10) -> list[str]:
    """Quick notes containing *text*, case-insensitively."""
    needle = (text or "").strip().lower()
    return [n for n in TRADING_NOTES if needle in n.lower()][:limit]


def is_catalogued(entry: str) -> bool:
    return (entry or "").strip().upper() in TRADING_PAIRS

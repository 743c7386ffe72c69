import logging
import random
import re
import time
from dataclasses import replace
from datetime import datetime

import yfinance as yf

from portfolio_tracker.models import Category, DataSource, InvestmentLot, PriceData

logger: logging.Logger = logging.getLogger(__name__)

# Yahoo Finance pairs for common crypto names and symbols
CRYPTO_SYMBOLS: dict[str, str] = {
    "BTC": "BTC-USD",
    "BITCOIN": "BTC-USD",
    "ETH": "ETH-USD",
    "ETHEREUM": "ETH-USD",
    "XRP": "XRP-USD",
    "RIPPLE": "XRP-USD",
    "SOL": "SOL-USD",
    "SOLANA": "SOL-USD",
    "ADA": "ADA-USD",
    "CARDANO": "ADA-USD",
    "DOT": "DOT1-USD",
    "POLKADOT": "DOT1-USD",
    "MATIC": "MATIC-USD",
    "POLYGON": "MATIC-USD",
    "AVAX": "AVAX-USD",
    "AVALANCHE": "AVAX-USD",
}

_TICKER_PATTERN = re.compile(r"^[A-Z0-9]{1,5}(-[A-Z]{3})?$")
_PAIRED_CRYPTO_PATTERN = re.compile(r"-[A-Z]{3}$")

GOLD_FUTURES_SYMBOL: str = "GC=F"
GOLD_SYMBOL_PREFIX: str = "GOLD_OZ_"


def normalize_symbol(symbol: str, category: Category | str) -> str:
    """
    Convert a user-entered ticker to the Yahoo Finance symbol.

    Crypto names and bare symbols become USD pairs (e.g. "bitcoin" -> "BTC-USD");
    everything else is upper-cased and returned as-is.
    """
    normalized: str = symbol.strip().upper()
    if Category(category) is Category.CRYPTO:
        if normalized in CRYPTO_SYMBOLS:
            return CRYPTO_SYMBOLS[normalized]
        if _PAIRED_CRYPTO_PATTERN.search(normalized):
            return normalized
        return f"{normalized}-USD"
    return normalized


def is_valid_ticker(ticker: str | None) -> bool:
    """Basic shape check: 1-5 alphanumerics, optionally followed by a currency suffix (e.g. -USD)."""
    if not ticker or not isinstance(ticker, str):
        return False
    return bool(_TICKER_PATTERN.match(ticker.strip().upper()))


def _is_rate_limit_error(error: Exception) -> bool:
    message: str = str(error).lower()
    return "rate limit" in message or "too many requests" in message


class PriceService:
    """Fetches current prices from Yahoo Finance and applies them to investment lots."""

    def __init__(self, max_retries: int = 3, max_backoff_seconds: float = 60.0):
        self.max_retries = max_retries
        self.max_backoff_seconds = max_backoff_seconds

    def _backoff(self, attempt: int) -> None:
        # Exponential backoff with jitter
        wait_time: float = min(
            self.max_backoff_seconds, (2**attempt) + (random.randint(0, 1000) / 1000)
        )
        logger.warning(f"Rate limited. Waiting {wait_time:.2f}s before retry")
        time.sleep(wait_time)

    def _last_and_previous(self, symbol: str) -> tuple[float, float] | None:
        """Last price and previous close for a symbol, retrying on rate limits."""
        retry_count = 0
        while retry_count <= self.max_retries:
            try:
                fast_info = yf.Ticker(symbol).fast_info
                price: float | None = fast_info.last_price
                previous_close: float | None = fast_info.previous_close
                if price is None or price <= 0:
                    logger.warning(f"No valid price for {symbol}: {price}")
                    return None
                return float(price), float(previous_close or 0.0)
            except Exception as e:
                if _is_rate_limit_error(e):
                    retry_count += 1
                    if retry_count > self.max_retries:
                        logger.error(f"Rate limit exceeded for {symbol}")
                        return None
                    self._backoff(retry_count)
                else:
                    logger.error(f"Failed to fetch price for {symbol}: {e}")
                    return None
        return None

    def fetch_price(self, symbol: str) -> PriceData | None:
        """Current price and daily change for a symbol, or None if it couldn't be fetched."""
        quote = self._last_and_previous(symbol)
        if quote is None:
            return None

        price, previous_close = quote
        change: float = price - previous_close
        change_percent: float = (change / previous_close * 100) if previous_close > 0 else 0.0
        logger.debug(f"{symbol}: price={price} change={change:.4f} ({change_percent:.2f}%)")
        return PriceData(
            symbol=symbol,
            price=price,
            change=change,
            change_percent=change_percent,
            last_updated=datetime.now(),
        )

    def fetch_prices(self, symbols: list[str]) -> dict[str, PriceData | None]:
        """
        Fetch prices for several symbols. Symbols that fail map to None.

        Duplicate symbols are fetched once. GOLD_OZ_<currency> symbols are derived
        with fetch_gold_price.
        """
        results: dict[str, PriceData | None] = {}
        for symbol in dict.fromkeys(s.strip() for s in symbols if s and s.strip()):
            if symbol.startswith(GOLD_SYMBOL_PREFIX):
                results[symbol] = self.fetch_gold_price(symbol.removeprefix(GOLD_SYMBOL_PREFIX))
            else:
                results[symbol] = self.fetch_price(symbol)
        return results

    def fetch_gold_price(self, currency: str = "AUD") -> PriceData | None:
        """
        Spot gold per troy ounce in `currency`, from the USD futures price and the FX rate.

        Returned under the synthetic symbol GOLD_OZ_<currency>.
        """
        currency = currency.strip().upper()
        gold_usd = self._last_and_previous(GOLD_FUTURES_SYMBOL)
        if currency == "USD":
            rate = (1.0, 1.0)
        else:
            rate = self._last_and_previous(f"{currency}USD=X")

        if gold_usd is None or rate is None:
            logger.warning(f"Could not derive gold price in {currency}")
            return None

        return PriceData(
            symbol=f"{GOLD_SYMBOL_PREFIX}{currency}",
            price=gold_usd[0] / rate[0],
            change=0.0,
            change_percent=0.0,
            last_updated=datetime.now(),
        )

    @staticmethod
    def symbols_for(lots: list[InvestmentLot]) -> list[str]:
        """Normalized symbols of all lots that have a ticker, without duplicates."""
        symbols = (normalize_symbol(lot.ticker, lot.category) for lot in lots if lot.ticker)
        return list(dict.fromkeys(symbols))

    @staticmethod
    def apply_prices(
        lots: list[InvestmentLot], prices: dict[str, PriceData | None]
    ) -> list[InvestmentLot]:
        """
        Return copies of the lots with fetched prices applied.

        Lots without a ticker or without a fetched price are returned unchanged.
        """
        updated: list[InvestmentLot] = []
        for lot in lots:
            price_data: PriceData | None = None
            if lot.ticker:
                price_data = prices.get(normalize_symbol(lot.ticker, lot.category))

            if price_data is None:
                updated.append(lot)
                continue

            updated.append(
                replace(
                    lot,
                    current_price=price_data.price,
                    last_updated=price_data.last_updated,
                    data_source=DataSource.YAHOO,
                )
            )
        return updated

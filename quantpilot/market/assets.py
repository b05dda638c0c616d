"""Demo instrument catalog."""

from typing import Optional

from quantpilot.models import Asset


# Price used when no instrument is selected (roughly BTC)
DEFAULT_PRICE = 64000.0

ASSETS: tuple[Asset, ...] = (
    Asset(id="1", symbol="NIFTY 50", name="Nifty 50 Index", price=22150.50, change=0.45, type="INDEX", icon="🇮🇳"),
    Asset(id="2", symbol="BTC", name="Bitcoin", price=64230.10, change=-1.2, type="CRYPTO", icon="₿"),
    Asset(id="3", symbol="ETH", name="Ethereum", price=3450.80, change=0.8, type="CRYPTO", icon="Ξ"),
    Asset(id="4", symbol="RELIANCE", name="Reliance Ind.", price=2950.00, change=1.5, type="STOCK", icon="R"),
    Asset(id="5", symbol="TATA", name="Tata Motors", price=980.20, change=-0.5, type="STOCK", icon="T"),
    Asset(id="6", symbol="GOLD", name="Gold (XAU)", price=2150.40, change=0.1, type="INDEX", icon="🥇"),
)


def list_assets() -> list[Asset]:
    """Return the catalog as a new list."""
    return list(ASSETS)


def find_asset(symbol: str) -> Optional[Asset]:
    """Look up an asset by symbol or id (case-insensitive).

    Args:
        symbol: Ticker symbol (e.g. "BTC", "nifty 50") or catalog id.

    Returns:
        Matching asset or None.
    """
    wanted = symbol.strip().upper()
    for asset in ASSETS:
        if asset.symbol.upper() == wanted or asset.id == wanted:
            return asset
    return None

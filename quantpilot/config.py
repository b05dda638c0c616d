"""Settings for QuantPilot.

Settings live in ``~/.config/quantpilot/config.toml``. A missing file
means defaults; a file that cannot be parsed or validated raises
``ConfigurationError``.
"""

import os
from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field, ValidationError

from quantpilot.errors import ConfigurationError
from quantpilot.market.assets import DEFAULT_PRICE
from quantpilot.market.history import HISTORY_SIZE
from quantpilot.market.session import DEFAULT_TICK_INTERVAL_MS
from quantpilot.models import BotConfig
from quantpilot.wallet.allocation import DEFAULT_TOTAL_CAPITAL


CONFIG_DIR = Path.home() / ".config" / "quantpilot"
CONFIG_PATH = CONFIG_DIR / "config.toml"

# Used when neither config.toml nor OPENAI_MODEL names a model
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_REQUEST_TIMEOUT = 60.0


class OpenAISettings(BaseModel):
    api_key: str = ""
    model: str = ""


class MarketSettings(BaseModel):
    tick_interval_ms: int = Field(default=DEFAULT_TICK_INTERVAL_MS, gt=0)
    history_size: int = Field(default=HISTORY_SIZE, ge=1)
    default_price: float = Field(default=DEFAULT_PRICE, gt=0)


class WalletSettings(BaseModel):
    total_capital: float = Field(default=DEFAULT_TOTAL_CAPITAL, ge=0)


class RequestSettings(BaseModel):
    timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0, description="Seconds per generation call")


class LoggingSettings(BaseModel):
    level: str = "WARNING"


class Settings(BaseModel):
    """Validated contents of config.toml."""

    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    market: MarketSettings = Field(default_factory=MarketSettings)
    wallet: WalletSettings = Field(default_factory=WalletSettings)
    requests: RequestSettings = Field(default_factory=RequestSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    bot: BotConfig = Field(default_factory=BotConfig)

    def get_api_key(self) -> Optional[str]:
        """API key from the config file, falling back to OPENAI_API_KEY."""
        key = self.openai.api_key.strip()
        if key and key != "your-openai-api-key":
            return key
        return os.environ.get("OPENAI_API_KEY") or None

    def get_model(self) -> str:
        """Model from the config file, then OPENAI_MODEL, then the default."""
        return self.openai.model or os.environ.get("OPENAI_MODEL", DEFAULT_MODEL)


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from a TOML file.

    Args:
        path: Config file path. Defaults to ``CONFIG_PATH``.

    Returns:
        Parsed settings, or defaults if the file does not exist.

    Raises:
        ConfigurationError: If the file is unreadable or invalid.
    """
    config_path = path or CONFIG_PATH

    if not config_path.exists():
        return Settings()

    try:
        data = toml.load(config_path)
    except (toml.TomlDecodeError, OSError) as e:
        raise ConfigurationError(f"Could not read {config_path}: {e}") from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings in {config_path}:\n{e}") from e


def create_template_config(path: Optional[Path] = None) -> Path:
    """Write a template configuration file.

    Args:
        path: Destination. Defaults to ``CONFIG_PATH``.

    Returns:
        Path of the written file.
    """
    config_path = path or CONFIG_PATH
    config_path.parent.mkdir(parents=True, exist_ok=True)

    template = {
        "openai": {
            "api_key": "",  # Leave empty to use OPENAI_API_KEY env var
            "model": DEFAULT_MODEL,
        },
        "market": {
            "tick_interval_ms": DEFAULT_TICK_INTERVAL_MS,
            "history_size": HISTORY_SIZE,
            "default_price": DEFAULT_PRICE,
        },
        "wallet": {
            "total_capital": DEFAULT_TOTAL_CAPITAL,
        },
        "requests": {
            "timeout": DEFAULT_REQUEST_TIMEOUT,
        },
        "logging": {
            "level": "WARNING",
        },
        "bot": {
            "market": "CRYPTO",
            "strategy": "TREND_FOLLOWING",
            "risk_profile": "BALANCED",
            "ai_model": "LSTM",
            "risk_per_trade": 1.0,
            "stop_loss": 2.0,
            "take_profit": 5.0,
            "use_secure_wallet": True,
            "vault_reserve_percent": 80.0,
            "strict_no_loss_mode": False,
        },
    }

    with open(config_path, "w") as f:
        toml.dump(template, f)

    return config_path

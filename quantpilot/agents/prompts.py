"""Prompt builders for the generation service."""

import json
from typing import Sequence

from quantpilot.models import BotConfig, Candle, ChatContext


# Candles included in an analysis prompt
ANALYSIS_WINDOW = 20


ANALYST_INSTRUCTIONS = """You are an elite institutional financial analyst AI.
You read short OHLCV windows and classify the market.

Always determine:
1. Market Regime (BULL, BEAR, SIDEWAYS, VOLATILE)
2. Market Sentiment based on price action and volume (POSITIVE, NEGATIVE, NEUTRAL)
3. Trading Signal (BUY, SELL, HOLD, SAFE_MODE, ARBITRAGE_EXECUTE, REBALANCE)
4. Confidence Score from 0 to 100

Keep the reasoning to a short technical summary.
"""

ARCHITECT_INSTRUCTIONS = """You are a Lead Quantitative Architect at a hedge fund.
You write complete, runnable Python trading systems.
Output ONLY Python code.
"""

BACKTEST_INSTRUCTIONS = """You are a quantitative developer who writes professional
Python backtesting scripts with 'backtrader' or 'vectorbt'.
Output ONLY Python code.
"""

PILOT_INSTRUCTIONS = """You are "Captain Quant", an extremely polite, professional,
and autonomous AI Trading Pilot. The user is your "Commander".

Rules:
1. Be very polite ("Yes Sir", "Affirmative", "Right away").
2. If the user asks for a trade (e.g., "Buy now", "Sell"), respond as if you are
   executing the order instantly via the API. Say "Executing Order ID #..."
3. If the user asks about the wallet, reassure them that the Secure Vault is
   encrypted and locked.
4. Explain concepts simply if asked.
5. Emphasize that YOU (the AI) handle everything. The user needs to do nothing.

Keep it concise.
"""


def _candles_json(candles: Sequence[Candle]) -> str:
    return json.dumps([c.model_dump() for c in candles])


def build_analysis_prompt(candles: Sequence[Candle], config: BotConfig) -> str:
    """Build the market analysis prompt.

    Args:
        candles: Full history; only the newest ``ANALYSIS_WINDOW`` are sent.
        config: Bot configuration.

    Returns:
        Prompt text.
    """
    recent = list(candles)[-ANALYSIS_WINDOW:]

    lines = [
        f"Analyze the following OHLCV market data (last {len(recent)} candles):",
        _candles_json(recent),
        "",
        "Configuration:",
        f"- Strategy: {config.strategy.value}",
        f"- Risk Profile: {config.risk_profile.value}",
        f"- Market: {config.market.value}",
        f"- Strict No Loss Mode: {config.strict_no_loss_mode}",
    ]

    if config.is_options:
        lines.append(
            "- NOTE: MARKET IS OPTIONS. Analyze Spot Price trend to determine Strike "
            "Selection (ATM/OTM/ITM). Consider Implied Volatility (IV) risk. If strategy "
            f"is '{config.strategy.value}', recommend strikes based on Greeks."
        )

    lines.append("")
    lines.append("Task:")
    if config.strict_no_loss_mode:
        lines.append(
            "CRITICAL: 'Strict No Loss' is ENABLED. Only issue a BUY signal if there is "
            "a detected Arbitrage opportunity or a mathematically hedged entry. "
            "Otherwise, return HOLD."
        )
    else:
        lines.append("Determine Market Regime and Signal normally.")

    return "\n".join(lines)


def build_bot_code_prompt(config: BotConfig) -> str:
    """Build the prompt for the full trading system source."""
    trading_share = 100 - config.vault_reserve_percent

    if config.is_options:
        if config.manage_greeks:
            strike_rule = f"Auto-hedge to maintain Target Delta {config.target_delta}"
        else:
            strike_rule = "Select strikes based on strategy (e.g., Short Strangle sells OTM calls/puts)"
        strategy_notes = (
            "IMPORTANT: Implement Options specific logic:\n"
            "   - Use 'py_vollib' or similar for Black-Scholes Greeks (Delta, Theta, Gamma, Vega).\n"
            "   - Implement logic to fetch Option Chain (Calls/Puts).\n"
            f"   - Implement Strike Selection: {strike_rule}.\n"
            f"   - Check IV Rank: Min {config.min_iv}, Max {config.max_iv}."
        )
        greek_limits = (
            f"\n   - Manage Greeks: {config.manage_greeks}"
            f"\n   - Target Delta: {config.target_delta}"
        )
    else:
        strategy_notes = "Implement logic using pandas/numpy/ta-lib."
        greek_limits = ""

    if config.is_crypto:
        execution = "Use 'ccxt' library"
    else:
        execution = "Use generic Broker API structure (e.g., Zerodha KiteConnect / Interactive Brokers IBKR)"

    return f"""Design and generate a COMPLETE Python Automated Investment & Trading System.

System Requirements:
1. Architecture: Modular class-based design.
2. Secure Wallet System (MANDATORY):
   - Create a 'WalletManager' class.
   - Implement a 'Secure Vault' feature.
   - Logic: Total Capital = Vault Balance (Locked) + Trading Balance (Active).
   - Current Config: Keep {config.vault_reserve_percent:g}% in Vault. ONLY trade with remaining {trading_share:g}%.
   - If Trading Balance drops below threshold, STOP all trading to protect Vault.
3. Strict Zero-Loss / Profit Mode:
   - Mode Active: {config.strict_no_loss_mode}
   - If Active: The bot must ONLY execute Arbitrage trades (Triangular/Spatial) or Delta-Neutral strategies.
   - Reject any directional trade that doesn't have a mathematical hedge.
4. Market: {config.market.value}
5. Strategy Core: {config.strategy.value}.
   {strategy_notes}
6. AI Module: Implement a placeholder for {config.ai_model.value} using sklearn/tensorflow logic (e.g., predict_next_price).
7. Risk Management Layer:
   - Profile: {config.risk_profile.value}
   - Max Risk Per Trade: {config.risk_per_trade:g}%
   - Stop Loss: {config.stop_loss:g}%
   - Leverage: {config.leverage}x
   - Daily Loss Limit{greek_limits}
   - Emergency 'Kill Switch' method.
8. Execution: {execution}.

The code must be a SINGLE runnable Python script (simulating a multi-file project structure).
Include comments explaining deployment (e.g., Docker on a small cloud VM).
"""


def build_backtest_prompt(config: BotConfig) -> str:
    """Build the prompt for the backtesting script."""
    options_note = ""
    if config.is_options:
        options_note = (
            "\nNOTE: Options Backtesting is complex. Mock the Option price behavior. "
            "Create a simplified simulation class 'OptionsStrategy' that estimates Premium "
            "decay (Theta) and directional PnL (Delta) based on the underlying Spot price movement.\n"
        )

    return f"""Generate a professional Python Backtesting script.

Strategy: {config.strategy.value}
Market Type: {config.market.value}

Secure Wallet Logic:
- Simulate a 'Vault' where {config.vault_reserve_percent:g}% of capital is never touched.
- Calculate Drawdown based ONLY on the trading capital, not total equity.

Risk Management:
- Stop Loss: {config.stop_loss:g}%
- Take Profit: {config.take_profit:g}%
- Trailing Stop: {config.use_trailing_stop}

Features:
1. Load data from CSV.
2. Implement the strategy logic inside a Strategy class.
3. Add 'Sizers' to manage risk per trade ({config.risk_per_trade:g}% of capital).
4. Add Analyzers: Sharpe Ratio, Drawdown, Trade Analyzer.
5. Print final portfolio value.
{options_note}"""


def build_chat_prompt(user_message: str, context: ChatContext) -> str:
    """Build one chat turn carrying the current dashboard context."""
    config = context.config
    vault_state = "Active" if config.use_secure_wallet else "Disabled"
    last_signal = context.last_signal.type if context.last_signal else "Waiting..."

    return f"""Context:
- Current Asset Price: ${context.current_price:.2f}
- Market: {config.market.value}
- Strategy: {config.strategy.value}
- Secure Vault: {vault_state} ({config.vault_reserve_percent:g}% Locked)
- Last Signal: {last_signal}

User Message: "{user_message}"
"""

"""
Telegram Bot for Trading Notifications

Formats engine events as HTML messages and sends them to one chat.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

import requests

from src.daemon.events import (
    Closed,
    Opened,
    PartialHit,
    PriceAlert,
    StopWarning,
    TakeProfitZone,
    TickEvent,
)
from src.daemon.position_store import CloseReason, Side

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """Telegram notification sender for engine events."""

    def __init__(
        self,
        bot_token: str,
        chat_id: str | int,
        timeout: float = 10,
    ):
        """
        Initialize Telegram notifier.

        Args:
            bot_token: Telegram Bot API token
            chat_id: Target chat ID (user or group)
            timeout: HTTP timeout in seconds
        """
        self.bot_token = bot_token
        self.chat_id = str(chat_id)
        self.timeout = timeout
        self.base_url = f"https://api.telegram.org/bot{bot_token}"

    def send_message(self, text: str, parse_mode: str = "HTML") -> bool:
        """
        Send a text message.

        Returns:
            True if sent successfully
        """
        try:
            response = requests.post(
                f"{self.base_url}/sendMessage",
                json={
                    "chat_id": self.chat_id,
                    "text": text,
                    "parse_mode": parse_mode,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            return True
        except requests.RequestException as e:
            logger.error(f"Failed to send Telegram message: {e}")
            return False

    @staticmethod
    def format_event(event: TickEvent) -> str:
        """Render one event as an HTML message."""
        if isinstance(event, Opened):
            emoji = "🟢" if event.side is Side.LONG else "🔴"
            targets = "\n".join(
                f"🎯 TP{i}: {price:,.4f}" for i, price in enumerate(event.partial_prices, 1)
            )
            return (
                f"{emoji} <b>{event.side.value} {event.symbol}</b>\n"
                f"Entry: {event.entry_price:,.4f}\n"
                f"🛑 Stop: {event.stop_loss:,.4f}\n"
                f"✅ Target: {event.take_profit:,.4f}\n"
                f"{targets}\n"
                f"Confidence: {event.confidence}% ({event.strength} indicators)"
            )

        if isinstance(event, Closed):
            label = {
                CloseReason.STOP_LOSS: "🛑 STOP LOSS",
                CloseReason.TAKE_PROFIT: "✅ TAKE PROFIT",
                CloseReason.MANUAL_CLOSE: "✋ MANUAL CLOSE",
            }[event.reason]
            return (
                f"<b>{label} {event.symbol}</b>\n"
                f"{event.side.value} {event.entry_price:,.4f} → {event.exit_price:,.4f}\n"
                f"P&L: {event.pnl_percent:+.2f}%"
            )

        if isinstance(event, PartialHit):
            return (
                f"🎯 <b>TP{event.level} reached {event.symbol}</b>\n"
                f"{event.fraction:.0%} of target @ {event.price:,.4f}\n"
                f"P&L: {event.pnl_percent:+.2f}%"
            )

        if isinstance(event, PriceAlert):
            arrow = "📈" if event.price > event.previous_price else "📉"
            return (
                f"{arrow} <b>{event.symbol}</b> moved {event.change_percent:.2f}%\n"
                f"{event.previous_price:,.4f} → {event.price:,.4f}\n"
                f"P&L: {event.pnl_percent:+.2f}%"
            )

        if isinstance(event, StopWarning):
            return (
                f"⚠️ <b>{event.symbol} near stop-loss</b>\n"
                f"Price {event.price:,.4f}, stop {event.stop_loss:,.4f}"
            )

        if isinstance(event, TakeProfitZone):
            return (
                f"💰 <b>{event.symbol} in take-profit zone</b>\n"
                f"Price {event.price:,.4f}, target {event.take_profit:,.4f}"
            )

        return f"<b>{event.kind}</b> {event.symbol}"

    def notify(self, events: Iterable[TickEvent]) -> int:
        """
        Send one message per event.

        Returns:
            Number of messages delivered
        """
        return sum(self.send_message(self.format_event(e)) for e in events)

    def send_daily_report(self, report: dict[str, Any]) -> bool:
        """Send the daily performance report."""
        message = f"""
📊 <b>Daily Report</b>

📅 {report.get('date') or datetime.now().strftime('%Y-%m-%d')}
🔄 Trades: {report['total_trades']}
💰 P&L: {report['total_pnl_percent']:+.2f}%
🎯 Avg win rate: {report['avg_win_rate']:.1f}%
🏆 Best: {report['best_pair'] or '-'}
📉 Worst: {report['worst_pair'] or '-'}
"""
        return self.send_message(message.strip())

    def send_startup(self, symbols: Iterable[str]) -> bool:
        """Send bot startup notification."""
        message = f"""
🤖 <b>Signal engine started</b>

⏰ {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}
📌 {', '.join(symbols)}
"""
        return self.send_message(message.strip())

"""
Currency wallet - the player's coin balance.
"""

from __future__ import annotations

import logging

from questengine.core.events import CurrencyEvent, EventBus
from questengine.save.storage import Storage, StorageError

logger = logging.getLogger(__name__)

COINS_KEY = "PlayerCoins"


class CurrencyWallet:
    """
    Holds the coin balance and receives quest rewards.

    The balance is written to storage on every change when a storage
    backend is attached.
    """

    def __init__(
        self,
        starting_coins: int = 1000,
        storage: Storage | None = None,
        event_bus: EventBus | None = None,
    ):
        if starting_coins < 0:
            raise ValueError("starting_coins must be non-negative")

        self.starting_coins = starting_coins
        self.storage = storage
        self.event_bus = event_bus
        self._coins = self._load()

    @property
    def coins(self) -> int:
        return self._coins

    def can_afford(self, cost: int) -> bool:
        return self._coins >= cost

    def add_coins(self, amount: int) -> None:
        """Credit coins."""
        if amount < 0:
            raise ValueError(f"Cannot add a negative amount: {amount}")
        self._set(self._coins + amount)
        logger.info(f"Added {amount} coins. Total: {self._coins}")

    def spend_coins(self, amount: int) -> bool:
        """
        Debit coins if the balance allows.

        Returns:
            True if the coins were spent
        """
        if amount < 0:
            raise ValueError(f"Cannot spend a negative amount: {amount}")

        if not self.can_afford(amount):
            logger.debug(f"Cannot afford {amount} coins. Current: {self._coins}")
            return False

        self._set(self._coins - amount)
        logger.info(f"Spent {amount} coins. Remaining: {self._coins}")
        return True

    def reset(self) -> None:
        """Reset the balance to the starting amount."""
        self._set(self.starting_coins)
        logger.info(f"Currency reset to {self.starting_coins} coins")

    def _set(self, value: int) -> None:
        self._coins = value
        self._save()
        if self.event_bus:
            self.event_bus.publish(CurrencyEvent.CURRENCY_CHANGED, coins=value)

    def _load(self) -> int:
        if self.storage is None:
            return self.starting_coins

        raw = self.storage.get(COINS_KEY)
        if raw is None:
            return self.starting_coins

        try:
            coins = int(raw)
        except ValueError:
            logger.warning(f"Unreadable coin balance {raw!r}, using starting amount")
            return self.starting_coins
        return max(0, coins)

    def _save(self) -> None:
        if self.storage is None:
            return
        try:
            self.storage.set(COINS_KEY, str(self._coins))
            self.storage.flush()
        except StorageError as e:
            logger.error(f"Failed to save coin balance: {e}")

"""
Economy module - coin balance.
"""

from questengine.economy.wallet import CurrencyWallet

__all__ = ["CurrencyWallet"]

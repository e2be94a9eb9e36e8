import pytest
from questengine.core.events import CurrencyEvent
from questengine.economy.wallet import COINS_KEY, CurrencyWallet
from questengine.save.storage import MemoryStorage

def test_add_and_spend(event_bus):
    changes = []
    event_bus.subscribe(CurrencyEvent.CURRENCY_CHANGED, lambda e: changes.append(e["coins"]), weak=False)
    wallet = CurrencyWallet(starting_coins=100, event_bus=event_bus)

    wallet.add_coins(50)
    assert wallet.spend_coins(120)
    assert not wallet.spend_coins(31)

    assert wallet.coins == 30
    assert changes == [150, 30]

def test_negative_amounts_rejected():
    wallet = CurrencyWallet(starting_coins=10)
    with pytest.raises(ValueError):
        wallet.add_coins(-1)
    with pytest.raises(ValueError):
        wallet.spend_coins(-1)
    with pytest.raises(ValueError):
        CurrencyWallet(starting_coins=-5)

def test_balance_persists():
    storage = MemoryStorage()
    wallet = CurrencyWallet(starting_coins=1000, storage=storage)
    wallet.add_coins(25)

    assert storage.get(COINS_KEY) == "1025"
    assert storage.flush_count == 1
    assert CurrencyWallet(starting_coins=1000, storage=storage).coins == 1025

@pytest.mark.parametrize("stored, expected", [
    (None, 1000),
    ("lots", 1000),
    ("-40", 0),
    ("7", 7),
])
def test_load_balance(stored, expected):
    storage = MemoryStorage({COINS_KEY: stored} if stored is not None else None)
    assert CurrencyWallet(starting_coins=1000, storage=storage).coins == expected

def test_reset():
    wallet = CurrencyWallet(starting_coins=200)
    wallet.spend_coins(150)
    wallet.reset()
    assert wallet.coins == 200

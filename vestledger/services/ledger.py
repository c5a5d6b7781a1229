"""Asset ledger used to move value in and out of vesting engines."""
import threading
from collections import defaultdict
from typing import Dict, Protocol, Set

import structlog

from vestledger.exceptions import TransferFailed
from vestledger.services.linear_release import check_amount

logger = structlog.get_logger()

NATIVE_ASSET = "native"


class AssetLedger(Protocol):
    """Balance/transfer primitive consumed by the engines.

    A transfer either completes fully or raises TransferFailed.
    """

    def balance_of(self, account: str, asset: str = NATIVE_ASSET) -> int:
        ...

    def transfer(self, sender: str, recipient: str, amount: int, asset: str = NATIVE_ASSET) -> None:
        ...

    def mint(self, account: str, amount: int, asset: str = NATIVE_ASSET) -> None:
        ...

    def burn(self, account: str, amount: int, asset: str = NATIVE_ASSET) -> None:
        ...


class InMemoryLedger:
    """
    Multi-asset balance book kept in process memory.

    Accounts can be frozen, which makes every transfer touching them fail.
    """

    def __init__(self):
        self._balances: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
        self._supply: Dict[str, int] = defaultdict(int)
        self._frozen: Set[str] = set()
        self._lock = threading.RLock()

    def balance_of(self, account: str, asset: str = NATIVE_ASSET) -> int:
        with self._lock:
            return self._balances[asset].get(account, 0)

    def total_supply(self, asset: str = NATIVE_ASSET) -> int:
        with self._lock:
            return self._supply[asset]

    def freeze(self, account: str) -> None:
        with self._lock:
            self._frozen.add(account)
        logger.info("Account frozen", account=account)

    def unfreeze(self, account: str) -> None:
        with self._lock:
            self._frozen.discard(account)
        logger.info("Account unfrozen", account=account)

    def is_frozen(self, account: str) -> bool:
        return account in self._frozen

    def mint(self, account: str, amount: int, asset: str = NATIVE_ASSET) -> None:
        check_amount(amount)
        with self._lock:
            self._balances[asset][account] += amount
            self._supply[asset] += amount
        logger.debug("Minted", account=account, amount=amount, asset=asset)

    def burn(self, account: str, amount: int, asset: str = NATIVE_ASSET) -> None:
        check_amount(amount)
        with self._lock:
            balance = self._balances[asset].get(account, 0)
            if balance < amount:
                raise TransferFailed(
                    "Burn exceeds balance", account=account, balance=balance, amount=amount
                )
            self._balances[asset][account] = balance - amount
            self._supply[asset] -= amount
        logger.debug("Burned", account=account, amount=amount, asset=asset)

    def transfer(self, sender: str, recipient: str, amount: int, asset: str = NATIVE_ASSET) -> None:
        check_amount(amount, allow_zero=True)
        with self._lock:
            for account in (sender, recipient):
                if account in self._frozen:
                    raise TransferFailed(f"Account {account} is frozen", account=account, asset=asset)

            balance = self._balances[asset].get(sender, 0)
            if balance < amount:
                raise TransferFailed(
                    "Transfer exceeds balance",
                    sender=sender,
                    balance=balance,
                    amount=amount,
                    asset=asset,
                )
            self._balances[asset][sender] = balance - amount
            self._balances[asset][recipient] += amount

        logger.debug("Transferred", sender=sender, recipient=recipient, amount=amount, asset=asset)

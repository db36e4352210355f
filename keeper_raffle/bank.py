"""
In-Memory Bank
Account balances for local runs; pays raffle winners
"""

import logging

logger = logging.getLogger(__name__)


class InMemoryBank:
    """PayoutGateway backed by a dict of balances"""

    def __init__(self, balances=None):
        self._balances = dict(balances or {})
        self._blocked = set()

    def fund(self, account, amount):
        if amount < 0:
            raise ValueError(f"Cannot fund a negative amount: {amount}")
        self._balances[account] = self._balances.get(account, 0) + amount

    def withdraw(self, account, amount):
        """Debit `account`, e.g. to pay a raffle entry"""
        balance = self._balances.get(account, 0)
        if amount > balance:
            raise ValueError(f"Insufficient balance for {account}: {balance} < {amount}")
        self._balances[account] = balance - amount

    def balance_of(self, account):
        return self._balances.get(account, 0)

    def block(self, account):
        """Make `account` reject incoming transfers"""
        self._blocked.add(account)

    def unblock(self, account):
        self._blocked.discard(account)

    def transfer(self, recipient, amount):
        if recipient in self._blocked:
            logger.warning(f"Transfer of {amount} rejected by {recipient}")
            return False
        self._balances[recipient] = self._balances.get(recipient, 0) + amount
        return True

import logging
from collections.abc import Iterable, Set

from .models import Transaction

logger = logging.getLogger(__name__)


def collect_subscribed_addresses(
    transactions: Iterable[Transaction],
    subscriptions: Set[str]
) -> dict[str, list[Transaction]]:
    """
    Group transactions by the subscribed addresses they touch.

    A transaction is listed under its sender and under its receiver when
    either is subscribed, so a transfer between two subscribed addresses
    shows up under both. Order within each list follows the input order and
    addresses without matches are left out.

    :param transactions: Transactions of one block
    :param subscriptions: Lowercase subscribed addresses
    :return: Mapping of address to its transactions
    """
    transactions_by_address: dict[str, list[Transaction]] = {}
    for transaction in transactions:
        # dict.fromkeys keeps a self-transfer from being listed twice
        for address in dict.fromkeys((transaction.from_address.lower(), transaction.to_address.lower())):
            if address in subscriptions:
                transactions_by_address.setdefault(address, []).append(transaction)
                logger.debug(f"Transaction added for {address}: {transaction}")
    return transactions_by_address

"""Rewards module.

Increment-only coin ledger credited on first lesson completion.
"""

from src.rewards.ledger import REWARDS_TABLES_CQL, RewardLedger, RewardLedgerInterface


__all__ = [
    "REWARDS_TABLES_CQL",
    "RewardLedger",
    "RewardLedgerInterface",
]

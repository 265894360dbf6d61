"""
Per-platform strategies for window discovery and clipboard access.

Use ``get_strategy_table`` to build the table for the running platform.
"""

from deskbridge.platforms.base import UNSUPPORTED, StrategyKind, Unsupported
from deskbridge.platforms.factory import StrategyTable, get_strategy_table

__all__ = [
    'UNSUPPORTED',
    'StrategyKind',
    'StrategyTable',
    'Unsupported',
    'get_strategy_table',
]

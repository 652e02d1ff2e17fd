"""
Service interfaces for dependency inversion.
Allows swapping the store without changing the write hooks.
"""

from .persistence import PendingWrite, PersistenceGateway, PreCommitHook

__all__ = ['PendingWrite', 'PersistenceGateway', 'PreCommitHook']

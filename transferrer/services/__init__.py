"""
Service layer for transferrer.

Contains business logic that orchestrates domain objects and infrastructure:
- LocationReconciler: Decides whether a package's repository moved
- TransferService: Signs and submits transfers for every moved package

Services are the primary API for commands to use.
"""

from .reconciler import LocationReconciler, find_tag
from .transfer_service import TransferService, changed_entries

__all__ = [
    'LocationReconciler',
    'find_tag',
    'TransferService',
    'changed_entries',
]

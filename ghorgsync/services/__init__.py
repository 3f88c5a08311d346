"""
Service layer for ghorgsync.

Contains the logic that orchestrates domain objects and infrastructure:
- scan_directory: Classify the local directory against the inventory
- SyncService: Clone, fetch, checkout and pull per repository

Services are the primary API for the CLI to use.
"""

from .scan_service import ScanResult, classify_entry, scan_directory
from .sync_service import SyncService, decide_actions

__all__ = [
    'ScanResult',
    'classify_entry',
    'scan_directory',
    'SyncService',
    'decide_actions',
]

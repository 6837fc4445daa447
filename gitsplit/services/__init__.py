"""
Service layer for gitsplit.

Services orchestrate the domain objects and the infrastructure clients.
"""

from .split_service import SplitService

__all__ = ['SplitService']

"""Purge package __init__.py"""
from .anchored import purge_up_to, select_purge_batch

__all__ = ["purge_up_to", "select_purge_batch"]

"""Taman Digital — a personal writing garden.

Posts, drafts, follows and messages persisted in a simple key-value store.
"""

__version__ = "0.1.0"

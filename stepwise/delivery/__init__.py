"""
Delivery Module - Terminal interface and profile persistence.

Components:
- cli: Typer + Rich ``stepwise`` command
- profile_store: One JSON document per learner
"""

from stepwise.delivery.profile_store import ProfileStore, learner_id_for

__all__ = ["ProfileStore", "learner_id_for"]

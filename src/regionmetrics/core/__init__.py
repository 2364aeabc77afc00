"""Tick scheduling core."""

from .tick_scheduler import TickScheduler, Updater

__all__ = ["TickScheduler", "Updater"]

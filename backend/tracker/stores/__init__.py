"""Entity stores: canonical collections plus their derived views."""

from tracker.stores.base import Store
from tracker.stores.games import GamesStore
from tracker.stores.last_played import LastPlayedStore
from tracker.stores.plays import PlaysStore
from tracker.stores.stats import StatsStore

__all__ = ["GamesStore", "LastPlayedStore", "PlaysStore", "StatsStore", "Store"]

"""RoomSync: shared chores and expenses for a household."""

__version__ = "0.1.0"

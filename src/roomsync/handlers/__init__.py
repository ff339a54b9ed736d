from roomsync.handlers.basic import basic_router
from roomsync.handlers.calendar import calendar_router
from roomsync.handlers.chores import chores_router
from roomsync.handlers.expenses import expenses_router

__all__ = ["basic_router", "calendar_router", "chores_router", "expenses_router"]

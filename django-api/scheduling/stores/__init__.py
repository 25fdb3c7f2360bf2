from scheduling.stores.interfaces import ChildDirectory, ScheduleStore

__all__ = ["ChildDirectory", "ScheduleStore"]

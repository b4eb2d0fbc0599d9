"""ORM Models — SQLAlchemy declarative models for calendars, slots, and notifications.

Invariants:
    - All models inherit from Base (db/base.py)
    - Rows are converted to frozen core entities at the repository boundary;
      ORM objects never leave infrastructure/sql_store.py

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all / autogenerate
"""

from slot_scheduler.models.executive_calendar import CalendarRecord  # noqa: F401
from slot_scheduler.models.scheduled_slot import SlotRecord  # noqa: F401
from slot_scheduler.models.notification import NotificationRecord  # noqa: F401

"""SQLAlchemy ORM models.

All tables live in the single rescue DB; the record store addresses them
by table name.
"""

from pawlink.models.base import Base
from pawlink.models.profile import Profile
from pawlink.models.report import Report
from pawlink.models.notification import Notification

__all__ = ["Base", "Profile", "Report", "Notification"]

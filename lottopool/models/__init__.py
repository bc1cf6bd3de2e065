"""ORM models."""

from lottopool.models.activity_log import ActivityLog
from lottopool.models.admin_user import AdminUser
from lottopool.models.drawing import Drawing
from lottopool.models.email import EmailLog, EmailTemplate
from lottopool.models.notification import Notification
from lottopool.models.pool import Pool, PoolMember
from lottopool.models.ticket import Ticket
from lottopool.models.user import User
from lottopool.models.winning import Winning

__all__ = [
    "ActivityLog",
    "AdminUser",
    "Drawing",
    "EmailLog",
    "EmailTemplate",
    "Notification",
    "Pool",
    "PoolMember",
    "Ticket",
    "User",
    "Winning",
]

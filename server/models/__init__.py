from server.extension import db
from server.models.user import User
from server.models.changelog import ChangeLog
from server.models.family import Family, FamilyMember, AMOUNT_TYPES, FAMILY_STATUSES
from server.models.donation import Donation, PAYMENT_METHODS
from server.models.zakat import ZakatTransaction, ZAKAT_TYPES
from server.models.reminder_log import ReminderLog, REMINDER_STATUSES

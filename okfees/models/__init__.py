from okfees.models.user import User
from okfees.models.profile import Profile
from okfees.models.student import Student
from okfees.models.fee_payment import FeePayment
from okfees.models.announcement import Announcement
from okfees.models.blog import Event, LiveClass, TopperStudent, InstituteInfo, StudentSummary
from okfees.models.recovery_code import RecoveryCode
from okfees.models.user_activity import UserActivity

__all__ = [
    'User', 'Profile', 'Student', 'FeePayment', 'Announcement', 'Event', 'LiveClass',
    'TopperStudent', 'InstituteInfo', 'StudentSummary', 'RecoveryCode', 'UserActivity',
]

from app.models.profile import UserProfile
from app.models.request import AnalysisRequest
from app.models.request_file import RequestFile
from app.models.notification import Notification
from app.models.activity_log import ActivityLog

from app.schemas.auth import LoginRequest, SignupRequest, TokenResponse
from app.schemas.users import ProfileOut, ProfileSummary, SelfProfileUpdate, AdminProfileUpdate, AdminProfileCreate
from app.schemas.requests import RequestCreate, RequestUpdate, StatusChange, AssignRequest, RequestOut, RequestEnvelope
from app.schemas.files import UploadInitRequest, FileOut, UploadTicketOut, DownloadOut
from app.schemas.notifications import NotificationOut, UnreadCount
from app.schemas.dashboard import DashboardStats, ActivityOut

from app.models.profile import Profile
from app.models.booking import Booking, BookingParticipant
from app.models.court_block import CourtBlock
from app.models.tournament import Tournament, TournamentParticipant, TournamentMatch
from app.models.invite_code import InviteCode, InviteCodeUse
from app.models.notification import Notification
from app.models.announcement import Announcement
from app.models.news import News
from app.models.video_lesson import VideoLesson
from app.models.activity_log import ActivityLog
from app.models.email_log import EmailLog, EmailUnsubscribe, EmailCampaign

# This makes the models directory a Python package and ensures all models are loaded

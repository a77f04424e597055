from lutonai.models.user import User, UserRole
from lutonai.models.event import Event, EventState, EventType
from lutonai.models.registration import EventRegistration, RegistrationStatus
from lutonai.models.sponsor import Sponsor, SponsorshipLevel
from lutonai.models.project import Project
from lutonai.models.post import Post, PostCategory
from lutonai.models.opportunity import Opportunity
from lutonai.models.community import CommunityMember, ContactMessage

__all__ = [
    "User", "UserRole",
    "Event", "EventState", "EventType",
    "EventRegistration", "RegistrationStatus",
    "Sponsor", "SponsorshipLevel",
    "Project",
    "Post", "PostCategory",
    "Opportunity",
    "CommunityMember", "ContactMessage",
]

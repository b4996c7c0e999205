from pourfoliolic.models.base import Base
from pourfoliolic.models.cheer import Cheer
from pourfoliolic.models.circle import Circle
from pourfoliolic.models.circle_invite import CircleInvite
from pourfoliolic.models.circle_member import CircleMember
from pourfoliolic.models.circle_post import CirclePost
from pourfoliolic.models.comment import Comment
from pourfoliolic.models.conversation import Conversation, ConversationParticipant
from pourfoliolic.models.drink import Drink
from pourfoliolic.models.follow import Follow
from pourfoliolic.models.message import Message
from pourfoliolic.models.notification import Notification
from pourfoliolic.models.user import User

__all__ = [
    "Base",
    "Cheer",
    "Circle",
    "CircleInvite",
    "CircleMember",
    "CirclePost",
    "Comment",
    "Conversation",
    "ConversationParticipant",
    "Drink",
    "Follow",
    "Message",
    "Notification",
    "User",
]

from plaza.models.chat_message import ChatMessage
from plaza.models.listing import Listing
from plaza.models.profile import Profile
from plaza.models.thread import Thread, ThreadMessage

__all__ = [
    "ChatMessage",
    "Listing",
    "Profile",
    "Thread",
    "ThreadMessage",
]

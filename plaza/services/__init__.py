from plaza.services.chat_service import ChatService
from plaza.services.dm_service import DirectMessageService
from plaza.services.listing_service import ListingService
from plaza.services.profile_service import ProfileService

__all__ = [
    "ChatService",
    "DirectMessageService",
    "ListingService",
    "ProfileService",
]

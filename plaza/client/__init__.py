from plaza.client.api_client import PlazaAPIError, PlazaClient
from plaza.client.poller import FeedPoller

__all__ = ["FeedPoller", "PlazaAPIError", "PlazaClient"]

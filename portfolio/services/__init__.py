"""
Domain services of the portfolio admin application.
"""
from portfolio.services.chat_logger import ChatLogger, should_notify_human
from portfolio.services.content import ContentManager
from portfolio.services.videos import VideoManager
from portfolio.services.youtube import YouTubeClient, extract_video_id

__all__ = [
    "ChatLogger",
    "ContentManager",
    "VideoManager",
    "YouTubeClient",
    "extract_video_id",
    "should_notify_human",
]

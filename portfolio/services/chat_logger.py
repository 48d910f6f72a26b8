"""
Chat logging and analytics.

Every exchange with the site assistant is stored in the key-value store so
the admin dashboard can show volumes, frequent questions and the chats the
assistant could not answer:

- ``chat:<id>``: the chat log, expiring after the retention period
- ``chats:<YYYY-MM-DD>``: list of chat IDs logged that UTC day
- ``stats:total-chats``: lifetime counter
- ``stats:top-questions``: sorted set of normalised questions by frequency
- ``inbox:needs-reply``: list of chat IDs awaiting a human reply
"""
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

import structlog
from prometheus_client import Counter

from portfolio.kv import KVStore
from portfolio.models.chat import ChatLog, ChatStats, TopQuestion
from portfolio.textutils import sanitize_text

# Set up structured logger
logger = structlog.get_logger()

# Define metrics
CHATS_LOGGED_TOTAL = Counter(
    'portfolio_chats_logged_total', 'Chat exchanges logged', ['needs_reply']
)
CHAT_LOG_ERRORS_TOTAL = Counter('portfolio_chat_log_errors_total', 'Chat exchanges that failed to log')

TOTAL_CHATS_KEY = "stats:total-chats"
TOP_QUESTIONS_KEY = "stats:top-questions"
NEEDS_REPLY_KEY = "inbox:needs-reply"

QUESTION_KEY_LENGTH = 100

LOW_CONFIDENCE_PHRASES = (
    "i don't have that information",
    "i'm not sure",
    "i cannot answer",
    "i don't know",
    "please contact",
    "suggest they contact",
    "tôi không có thông tin",
    "tôi không chắc",
    "liên hệ trực tiếp",
)


def daily_key(day: date) -> str:
    return f"chats:{day.isoformat()}"


def utc_date(value: datetime) -> date:
    """UTC calendar day of a datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).date()


def question_key(message: str) -> str:
    """Normalise a question for frequency counting."""
    return message.lower().strip()[:QUESTION_KEY_LENGTH]


def should_notify_human(assistant_response: str) -> bool:
    """
    Detect a response where the assistant could not answer confidently.

    Args:
        assistant_response: Text the assistant replied with

    Returns:
        bool: True if the response contains a low-confidence phrase
    """
    response = assistant_response.lower()
    return any(phrase in response for phrase in LOW_CONFIDENCE_PHRASES)


class ChatLogger:
    """
    Store chat logs and compute chat analytics.
    """

    def __init__(self, kv: KVStore, ttl_days: int = 90, top_questions_limit: int = 10):
        """
        Initialize the chat logger.

        Args:
            kv: Key-value store
            ttl_days: Days a chat log is retained
            top_questions_limit: Number of questions reported in the stats
        """
        self.kv = kv
        self.ttl_seconds = ttl_days * 24 * 60 * 60
        self.top_questions_limit = top_questions_limit

    async def log_chat(self, log: ChatLog) -> None:
        """
        Record a chat exchange.

        Failures are logged and swallowed.

        Args:
            log: Chat exchange to record
        """
        try:
            log = log.model_copy(update={"user_message": sanitize_text(log.user_message)})

            await self.kv.set(f"chat:{log.id}", log.to_dict(), ttl=self.ttl_seconds)
            await self.kv.lpush(daily_key(utc_date(log.timestamp)), log.id)
            await self.kv.incr(TOTAL_CHATS_KEY)
            await self.kv.zincrby(TOP_QUESTIONS_KEY, 1, question_key(log.user_message))

            if log.needs_human_reply:
                await self.kv.lpush(NEEDS_REPLY_KEY, log.id)

            CHATS_LOGGED_TOTAL.labels(needs_reply=str(log.needs_human_reply).lower()).inc()
            logger.debug("Logged chat", chat_id=log.id, needs_reply=log.needs_human_reply)

        except Exception as e:
            CHAT_LOG_ERRORS_TOTAL.inc()
            logger.error("Failed to log chat", chat_id=log.id, error=str(e))

    async def _count_days(self, today: date, days: int) -> int:
        total = 0
        for offset in range(days):
            total += await self.kv.llen(daily_key(today - timedelta(days=offset)))
        return total

    async def get_chat_stats(self, now: Optional[datetime] = None) -> ChatStats:
        """
        Aggregate chat statistics for the admin dashboard.

        Week and month figures are the sums of the last 7 and 30 daily lists,
        today included.

        Args:
            now: Reference time, defaults to the current UTC time

        Returns:
            ChatStats: Aggregated statistics

        Raises:
            StorageError: If the key-value store fails
        """
        today = utc_date(now or datetime.now(timezone.utc))

        top = await self.kv.zrange(
            TOP_QUESTIONS_KEY, 0, self.top_questions_limit - 1, desc=True, withscores=True
        )

        return ChatStats(
            total_chats=await self.kv.get_int(TOTAL_CHATS_KEY),
            chats_today=await self.kv.llen(daily_key(today)),
            chats_this_week=await self._count_days(today, 7),
            chats_this_month=await self._count_days(today, 30),
            top_questions=[
                TopQuestion(question=question, count=int(score)) for question, score in top
            ],
            needs_reply=await self.kv.llen(NEEDS_REPLY_KEY),
        )

    async def _load(self, chat_ids: List[str]) -> List[ChatLog]:
        logs = []
        for chat_id in chat_ids:
            data = await self.kv.get(f"chat:{chat_id}")
            if isinstance(data, dict):
                logs.append(ChatLog.model_validate(data))
        return logs

    async def get_chat_logs(self, start: datetime, end: datetime) -> List[ChatLog]:
        """
        Chat logs recorded between two dates, newest first.

        Both ends are inclusive and compared by UTC calendar day. Logs whose
        retention expired are skipped.

        Args:
            start: First day of the range
            end: Last day of the range

        Returns:
            List[ChatLog]: Logs in the range
        """
        day = utc_date(start)
        last = utc_date(end)

        logs: List[ChatLog] = []
        while day <= last:
            logs.extend(await self._load(await self.kv.lrange(daily_key(day), 0, -1)))
            day += timedelta(days=1)

        return sorted(logs, key=lambda log: log.timestamp, reverse=True)

    async def get_needs_reply_chats(self) -> List[ChatLog]:
        return await self._load(await self.kv.lrange(NEEDS_REPLY_KEY, 0, -1))

    async def mark_as_replied(self, chat_id: str) -> bool:
        """
        Remove a chat from the needs-reply inbox and clear its flag.

        Args:
            chat_id: Chat ID

        Returns:
            bool: True if the chat was in the inbox
        """
        removed = await self.kv.lrem(NEEDS_REPLY_KEY, 0, chat_id)

        data = await self.kv.get(f"chat:{chat_id}")
        if isinstance(data, dict):
            log = ChatLog.model_validate(data)
            age = (datetime.now(timezone.utc) - log.timestamp).total_seconds()
            ttl = int(self.ttl_seconds - age)
            if ttl > 0:
                log.needs_human_reply = False
                await self.kv.set(f"chat:{chat_id}", log.to_dict(), ttl=ttl)

        logger.info("Marked chat as replied", chat_id=chat_id)
        return removed > 0

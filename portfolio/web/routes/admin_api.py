"""
Admin JSON API: chat statistics, chat logs and chat log export.
"""
import csv
import io
import json
import math
from datetime import datetime, timedelta, timezone
from typing import List, Literal, Optional

import structlog
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse, Response

from portfolio.auth import require_admin_api
from portfolio.context import AppContext
from portfolio.errors import ValidationError
from portfolio.models.base import CamelModel
from portfolio.models.chat import ChatLog
from portfolio.web.dependencies import get_context

# Set up structured logger
logger = structlog.get_logger()

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin_api)])

MARK_REPLIED = "markReplied"

EXPORT_COLUMNS = [
    "ID",
    "Timestamp",
    "Date",
    "Time",
    "User Message",
    "Assistant Response",
    "Page Context",
    "Video ID",
    "Relevant Docs",
    "Response Time (ms)",
    "Needs Reply",
]


class ChatLogAction(CamelModel):
    chat_id: Optional[str] = None
    action: Optional[str] = None


@router.get("/stats")
async def chat_stats(ctx: AppContext = Depends(get_context)):
    """Chat statistics for the dashboard."""
    try:
        stats = await ctx.chat_logger.get_chat_stats()
    except Exception:
        logger.exception("Failed to get chat statistics")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to get chat statistics"},
        )
    return {"success": True, "stats": stats.to_dict()}


@router.get("/chatlogs")
async def list_chat_logs(
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    needs_reply: Optional[bool] = Query(None, alias="needsReply"),
    search: Optional[str] = None,
    limit: int = Query(20, ge=1, le=500),
    offset: int = Query(0, ge=0),
    ctx: AppContext = Depends(get_context),
):
    """
    Chat logs in a date range, newest first.

    The range defaults to the last seven days. Logs can be narrowed to those
    awaiting a reply (or not) and to those whose question or answer contains
    a search term.
    """
    now = datetime.now(timezone.utc)
    end = end_date or now
    start = start_date or now - timedelta(days=7)

    logs = await ctx.chat_logger.get_chat_logs(start, end)

    if needs_reply is not None:
        logs = [log for log in logs if log.needs_human_reply == needs_reply]

    if search:
        term = search.lower()
        logs = [
            log for log in logs
            if term in log.user_message.lower() or term in log.assistant_response.lower()
        ]

    total = len(logs)
    return {
        "success": True,
        "logs": [log.to_dict() for log in logs[offset:offset + limit]],
        "total": total,
        "pagination": {
            "limit": limit,
            "offset": offset,
            "totalPages": math.ceil(total / limit),
        },
    }


@router.post("/chatlogs")
async def chat_log_action(body: ChatLogAction, ctx: AppContext = Depends(get_context)):
    if not body.chat_id:
        raise ValidationError("Chat ID is required")
    if body.action != MARK_REPLIED:
        raise ValidationError("Invalid action")

    await ctx.chat_logger.mark_as_replied(body.chat_id)
    return {"success": True, "message": "Chat marked as replied"}


def chat_logs_to_csv(logs: List[ChatLog]) -> str:
    """Render chat logs as CSV, one row per exchange."""
    if not logs:
        return "No data available"

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for log in logs:
        when = log.timestamp.astimezone(timezone.utc)
        context = log.page_context
        writer.writerow([
            log.id,
            when.isoformat(),
            when.date().isoformat(),
            when.strftime("%H:%M:%S"),
            log.user_message,
            log.assistant_response,
            context.page if context else "",
            (context.video_id if context else None) or "",
            log.relevant_docs or 0,
            log.response_time or 0,
            "YES" if log.needs_human_reply else "NO",
        ])
    return buffer.getvalue().rstrip("\n")


@router.get("/chatlogs/export")
async def export_chat_logs(
    export_format: Literal["csv", "json"] = Query("csv", alias="format"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    ctx: AppContext = Depends(get_context),
):
    """
    Download chat logs as a CSV or JSON attachment.

    The range defaults to the last 30 days.
    """
    now = datetime.now(timezone.utc)
    end = end_date or now
    start = start_date or now - timedelta(days=30)

    logs = await ctx.chat_logger.get_chat_logs(start, end)
    filename = f"chat-logs-{start.date().isoformat()}-to-{end.date().isoformat()}.{export_format}"
    logger.info("Exporting chat logs", format=export_format, count=len(logs))

    if export_format == "json":
        body = json.dumps([log.to_dict() for log in logs], indent=2, ensure_ascii=False)
        media_type = "application/json"
    else:
        body = chat_logs_to_csv(logs)
        media_type = "text/csv"

    return Response(
        content=body,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

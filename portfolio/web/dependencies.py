"""
FastAPI dependencies giving routes access to the application context.
"""
from fastapi import Request

from portfolio.config import Settings
from portfolio.context import AppContext


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_settings(request: Request) -> Settings:
    return request.app.state.settings

"""
Web layer of the portfolio admin application.
"""
from portfolio.web.app import create_app

__all__ = ["create_app"]

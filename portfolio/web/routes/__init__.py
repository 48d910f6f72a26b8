"""
HTTP routes of the portfolio admin application.

Each module defines its own APIRouter; admin routers carry the admin guard
as a router-level dependency.
"""

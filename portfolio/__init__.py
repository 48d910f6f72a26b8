"""
Portfolio Admin

A content and admin web application: public blog and project APIs, an admin
area for managing videos and vector data, and chat analytics.
"""

__version__ = "0.1.0"
__author__ = "Portfolio Admin Team"
__description__ = "Content management and admin dashboard for a personal portfolio site"
__license__ = "MIT"

# Version info tuple
VERSION_INFO = tuple(map(int, __version__.split('.')))

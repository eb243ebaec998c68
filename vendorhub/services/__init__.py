"""
Business logic shared by the route handlers.
"""

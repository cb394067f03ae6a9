"""FastAPI Issue Tracker Application.

A FastAPI application for tracking issues with:
- RESTful CRUD operations for users, tags and issues
- Session cookie and API key authentication
- SQLAlchemy ORM with async support
- Celery jobs for session maintenance
- Slack notifications
"""

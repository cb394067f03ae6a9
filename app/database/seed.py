"""Populate the database with sample users, tags and issues.

Run with ``python -m app.database.seed``. Existing data is removed first.
"""

import logging

from sqlalchemy import delete
from sqlalchemy.orm import Session

from app.database import models
from app.database.config import Base, SyncSessionLocal, sync_engine
from app.security import hash_password

logger = logging.getLogger(__name__)

SAMPLE_USERS = [
    {"email": "john@example.com", "name": "John Doe", "password": "password123"},
    {"email": "jane@example.com", "name": "Jane Smith", "password": "password123"},
    {"email": "admin@example.com", "name": "Admin User", "password": "admin123"},
    {"email": "dev@example.com", "name": "Developer", "password": "dev123"},
]

SAMPLE_TAGS = [
    {"name": "frontend", "color": "#3b82f6"},
    {"name": "backend", "color": "#10b981"},
    {"name": "bug", "color": "#ef4444"},
    {"name": "feature", "color": "#8b5cf6"},
    {"name": "enhancement", "color": "#f59e0b"},
    {"name": "documentation", "color": "#6b7280"},
]

# Users and tags are referenced by their position in the lists above
SAMPLE_ISSUES = [
    {
        "title": "Set up project structure",
        "description": "Initialize the project with proper directory structure and configuration files.",
        "status": "done",
        "priority": "high",
        "assigned_user": 0,
        "created_by_user": 2,
        "tags": [1],
    },
    {
        "title": "Design user authentication flow",
        "description": (
            "Create wireframes and user flows for the authentication system "
            "including sign up, sign in, and password reset."
        ),
        "status": "in_progress",
        "priority": "high",
        "assigned_user": 1,
        "created_by_user": 2,
        "tags": [0, 3],
    },
    {
        "title": "Fix issue list filtering",
        "description": (
            'The issue list filter by status is not working correctly. '
            'When selecting "in progress", it shows all issues.'
        ),
        "status": "not_started",
        "priority": "urgent",
        "assigned_user": 0,
        "created_by_user": 1,
        "tags": [0, 2],
    },
    {
        "title": "Add dark mode support",
        "description": "Implement dark mode toggle functionality with proper theme switching and persistence.",
        "status": "not_started",
        "priority": "low",
        "assigned_user": None,
        "created_by_user": 3,
        "tags": [0, 4],
    },
    {
        "title": "API documentation",
        "description": "Create comprehensive API documentation with examples for all endpoints.",
        "status": "not_started",
        "priority": "medium",
        "assigned_user": 3,
        "created_by_user": 2,
        "tags": [5],
    },
    {
        "title": "Database performance optimization",
        "description": (
            "Review and optimize database queries for better performance, "
            "especially for the issues list with filtering."
        ),
        "status": "not_started",
        "priority": "medium",
        "assigned_user": None,
        "created_by_user": 2,
        "tags": [1, 4],
    },
]


def clear_database(db: Session) -> None:
    # Children before parents
    for table in reversed(Base.metadata.sorted_tables):
        db.execute(delete(table))
    db.commit()
    # Rows are gone; drop any objects the session still holds for them
    db.expunge_all()


def seed_database(db: Session) -> dict[str, int]:
    """Replace all data with the sample set and return how many rows of each kind were created."""
    clear_database(db)

    users = [
        models.User(email=user["email"], name=user["name"], password_hash=hash_password(user["password"]))
        for user in SAMPLE_USERS
    ]
    db.add_all(users)
    for user in users:
        logger.info(f"Created user: {user.name} ({user.email})")

    tags = [models.Tag(name=tag["name"], color=tag["color"]) for tag in SAMPLE_TAGS]
    db.add_all(tags)
    for tag in tags:
        logger.info(f"Created tag: {tag.name}")

    for sample in SAMPLE_ISSUES:
        assignee = sample["assigned_user"]
        issue = models.Issue(
            title=sample["title"],
            description=sample["description"],
            status=sample["status"],
            priority=sample["priority"],
            assigned_user=users[assignee] if assignee is not None else None,
            created_by_user=users[sample["created_by_user"]],
            tags=[tags[index] for index in sample["tags"]],
        )
        db.add(issue)
        logger.info(f"Created issue: {issue.title}")

    db.commit()
    return {"users": len(users), "tags": len(tags), "issues": len(SAMPLE_ISSUES)}


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(name)s | %(message)s")
    Base.metadata.create_all(sync_engine)

    logger.info("Seeding database with sample data...")
    db = SyncSessionLocal()
    try:
        seed_database(db)
    except Exception:
        db.rollback()
        logger.exception("Error seeding database")
        raise
    finally:
        db.close()

    logger.info("Database seeding completed successfully!")
    logger.info("Sample users created:")
    for user in SAMPLE_USERS:
        logger.info(f"- {user['email']} / {user['password']}")


if __name__ == "__main__":
    main()

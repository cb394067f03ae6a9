'''Helpers for arranging test data.

The `create_*` helpers write straight to the database through a sync session,
bypassing the API, so tests can set up state the API would not allow.
'''

from typing import Optional

from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.database import models
from app.security import hash_password

fake = Faker()

TEST_PASSWORD = "correct-horse-battery"


def sign_up(client: TestClient, email: Optional[str] = None, name: Optional[str] = None,
            password: str = TEST_PASSWORD) -> dict:
    '''Register through the API; the client keeps the session cookie.'''
    response = client.post("/api/auth/sign-up/email", json={
        "email": email or fake.unique.email(),
        "name": name or fake.name(),
        "password": password,
    })
    assert response.status_code == 201, response.text
    return response.json()["data"]


def create_test_user(db: Session, **overrides) -> models.User:
    data = {
        "email": fake.unique.email(),
        "name": fake.name(),
        "password_hash": hash_password(TEST_PASSWORD),
    }
    data.update(overrides)
    user = models.User(**data)
    db.add(user)
    db.commit()
    return user


def create_test_tag(db: Session, **overrides) -> models.Tag:
    data = {"name": "test-tag", "color": "#3b82f6"}
    data.update(overrides)
    tag = models.Tag(**data)
    db.add(tag)
    db.commit()
    return tag


def create_test_issue(db: Session, created_by_user_id: str, tags: Optional[list] = None,
                      **overrides) -> models.Issue:
    data = {
        "title": "Test Issue",
        "description": "Test Description",
        "status": "not_started",
        "priority": "medium",
        "assigned_user_id": None,
    }
    data.update(overrides)
    issue = models.Issue(created_by_user_id=created_by_user_id, tags=tags or [], **data)
    db.add(issue)
    db.commit()
    return issue

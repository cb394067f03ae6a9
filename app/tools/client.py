"""HTTP client tools wrapping the issue tracker REST API.

Each tool returns a plain dict describing the HTTP exchange so the result can
be handed straight to an assistant or printed as JSON::

    {"status": 201, "data": {...}, "headers": {...}}

Network failures never raise; they come back as ``{"status": 0, "error": "..."}``.
"""

import logging
import os
from typing import Any, Optional

import httpx

from app.schemas import IssuePriority, IssueStatus

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "http://localhost:8000/api"


class TrackerTools:
    """Fixed-purpose operations against the issues API, authenticated with an API key."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        bug_tag_id: Optional[int] = None,
        feature_tag_id: Optional[int] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key or os.getenv("TRACKER_API_KEY")
        self.base_url = (base_url or os.getenv("API_BASE_URL", DEFAULT_API_BASE_URL)).rstrip("/")
        self.bug_tag_id = bug_tag_id if bug_tag_id is not None else int(os.getenv("BUG_TAG_ID", "3"))
        self.feature_tag_id = (
            feature_tag_id if feature_tag_id is not None else int(os.getenv("FEATURE_TAG_ID", "4"))
        )
        self.timeout = timeout
        self.transport = transport

    def make_request(self, method: str, path: str, data: Optional[dict] = None) -> dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["x-api-key"] = self.api_key

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.request(method, f"{self.base_url}{path}", json=data, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Request to {method} {path} failed: {str(e)}")
            return {"status": 0, "error": str(e)}

        try:
            body = response.json()
        except ValueError:
            body = response.text

        return {
            "status": response.status_code,
            "data": body,
            "headers": dict(response.headers),
        }

    def create_issue(
        self,
        title: str,
        description: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        assigned_user_id: Optional[str] = None,
        tag_ids: Optional[list[int]] = None,
    ) -> dict[str, Any]:
        """Create an issue with whichever fields are given."""
        issue_data = {
            "title": title,
            "description": description,
            "status": IssueStatus(status).value if status else None,
            "priority": IssuePriority(priority).value if priority else None,
            "assigned_user_id": assigned_user_id,
            "tag_ids": tag_ids,
        }
        payload = {key: value for key, value in issue_data.items() if value is not None}
        return self.make_request("POST", "/issues", payload)

    def create_bug(self, title: str, description: str) -> dict[str, Any]:
        """Create a high priority issue carrying the bug tag."""
        return self.create_issue(
            title=title,
            description=description,
            status=IssueStatus.NOT_STARTED.value,
            priority=IssuePriority.HIGH.value,
            tag_ids=[self.bug_tag_id],
        )

    def create_feature_request(self, title: str, description: str) -> dict[str, Any]:
        """Create a low priority issue carrying the feature tag."""
        return self.create_issue(
            title=title,
            description=description,
            status=IssueStatus.NOT_STARTED.value,
            priority=IssuePriority.LOW.value,
            tag_ids=[self.feature_tag_id],
        )

    def update_ticket_status(self, issue_id: int, status: str) -> dict[str, Any]:
        return self.make_request("PUT", f"/issues/{issue_id}", {"status": IssueStatus(status).value})

"""Non-Celery background tasks for notifications and outbound communications."""

import logging
import os

import httpx

from app.schemas import IssueResponse

logger = logging.getLogger(__name__)


def _issue_fields(issue: IssueResponse) -> list[dict]:
    assignee = issue.assigned_user.name if issue.assigned_user else "_Unassigned_"
    return [
        {"type": "mrkdwn", "text": f"*Title:*\n{issue.title}"},
        {"type": "mrkdwn", "text": f"*Priority:*\n{issue.priority.value}"},
        {"type": "mrkdwn", "text": f"*Status:*\n{issue.status.value}"},
        {"type": "mrkdwn", "text": f"*Assignee:*\n{assignee}"},
    ]


def build_slack_payload(header: str, issue: IssueResponse) -> dict:
    """Block Kit message describing an issue."""
    return {
        "blocks": [
            {
                "type": "header",
                "text": {
                    "type": "plain_text",
                    "text": f"{header} (#{issue.id})",
                },
            },
            {
                "type": "section",
                "fields": _issue_fields(issue),
            },
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": f"*Description:*\n{issue.description or '_No description provided_'}",
                },
            },
        ]
    }


def _post_to_slack(payload: dict, issue_id: int) -> bool:
    slack_webhook_url = os.environ.get("SLACK_WEBHOOK_URL")
    if not slack_webhook_url:
        logger.warning("SLACK_WEBHOOK_URL not set, skipping notification")
        return False

    try:
        with httpx.Client(timeout=5.0) as client:
            response = client.post(slack_webhook_url, json=payload)
            response.raise_for_status()

        logger.info(
            "Slack notification sent successfully",
            extra={"issue_id": issue_id},
        )
        return True

    except httpx.HTTPError:
        logger.exception(
            "Failed to send Slack notification",
            extra={"issue_id": issue_id},
        )
        return False


def notify_issue_creation(issue: IssueResponse) -> bool:
    """Send a Slack notification when a new issue is created.

    This is a FastAPI BackgroundTask (not Celery), suitable for quick,
    synchronous operations that should not block the main request.

    Args:
        issue: The created issue, as returned by the API

    Returns:
        True if Slack accepted the message
    """
    logger.info("Issue created", extra={"issue_id": issue.id})
    return _post_to_slack(build_slack_payload("New Issue Created", issue), issue.id)


def notify_issue_assignment(issue: IssueResponse) -> bool:
    """Send a Slack notification when an issue changes hands."""
    logger.info(
        "Issue assignee changed",
        extra={"issue_id": issue.id, "assigned_user_id": issue.assigned_user_id},
    )
    return _post_to_slack(build_slack_payload("Issue Assigned", issue), issue.id)

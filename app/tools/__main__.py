"""Command line entry point for the tracker tools.

Examples::

    python -m app.tools create-bug --title "Crash on save" --description "Stack trace attached"
    python -m app.tools update-ticket-status --id 12 --status done
"""

import argparse
import json
import sys
from typing import Optional

from app.schemas import IssuePriority, IssueStatus
from app.tools.client import TrackerTools

STATUSES = [status.value for status in IssueStatus]
PRIORITIES = [priority.value for priority in IssuePriority]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="app.tools", description="Issue tracker API tools")
    parser.add_argument("--api-key", help="API key (defaults to $TRACKER_API_KEY)")
    parser.add_argument("--base-url", help="API base URL (defaults to $API_BASE_URL)")
    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("issues-create", help="Create a new issue")
    create.add_argument("--title", required=True)
    create.add_argument("--description")
    create.add_argument("--status", choices=STATUSES)
    create.add_argument("--priority", choices=PRIORITIES)
    create.add_argument("--assigned-user-id")
    create.add_argument("--tag-id", dest="tag_ids", type=int, action="append")

    for name, help_text in (
        ("create-bug", "Create a high priority bug"),
        ("create-feature-request", "Create a low priority feature request"),
    ):
        sub = commands.add_parser(name, help=help_text)
        sub.add_argument("--title", required=True)
        sub.add_argument("--description", required=True)

    update = commands.add_parser("update-ticket-status", help="Change the status of an issue")
    update.add_argument("--id", dest="issue_id", type=int, required=True)
    update.add_argument("--status", choices=STATUSES, required=True)

    return parser


def run(argv: Optional[list[str]] = None, tools: Optional[TrackerTools] = None) -> dict:
    args = build_parser().parse_args(argv)
    tools = tools or TrackerTools(api_key=args.api_key, base_url=args.base_url)

    if args.command == "issues-create":
        return tools.create_issue(
            title=args.title,
            description=args.description,
            status=args.status,
            priority=args.priority,
            assigned_user_id=args.assigned_user_id,
            tag_ids=args.tag_ids,
        )
    if args.command == "create-bug":
        return tools.create_bug(args.title, args.description)
    if args.command == "create-feature-request":
        return tools.create_feature_request(args.title, args.description)
    return tools.update_ticket_status(args.issue_id, args.status)


def main(argv: Optional[list[str]] = None) -> int:
    result = run(argv)
    print(json.dumps(result, indent=2))
    status = result.get("status", 0)
    return 0 if 200 <= status < 300 else 1


if __name__ == "__main__":
    sys.exit(main())

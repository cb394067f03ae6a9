"""Thin HTTP tools over the issue tracker API, for assistants and scripts."""

from app.tools.client import TrackerTools

__all__ = ["TrackerTools"]

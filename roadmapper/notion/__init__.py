"""
Notion workspace access: REST client and page/entity mapping.
"""

from roadmapper.notion.client import NotionAPIError, NotionClient

__all__ = ["NotionAPIError", "NotionClient"]

"""Tool registration modules for the prismkit MCP server."""

from .prismic import register_prismic_tools

__all__ = [
    "register_prismic_tools",
]

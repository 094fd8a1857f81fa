"""Markup rendering for prepared elements and views."""

from .markup import MarkupHelper, create_attributes_string, render_view

__all__ = ["MarkupHelper", "create_attributes_string", "render_view"]

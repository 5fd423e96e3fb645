"""Bindings to the third-party Markdown and HTML libraries."""

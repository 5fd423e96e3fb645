"""Extent resolution, numbering and output assembly shared by the transforms."""

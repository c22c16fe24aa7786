"""Pydantic schemas of the portal pages and actions."""

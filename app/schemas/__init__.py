# app/schemas/__init__.py
"""Pydantic schemas shared across API domains"""
from .response import ApiResponse, ok
from .user import RoleSummary, UserRead, UserSummary

__all__ = ["ApiResponse", "ok", "RoleSummary", "UserRead", "UserSummary"]

"""Shared-secret admin authentication."""

from core.auth.admin import ADMIN_HEADER, is_admin, require_admin

__all__ = ["ADMIN_HEADER", "is_admin", "require_admin"]

"""
Core business logic package for Greenleaf Bookings.

All business logic, data access, and storage integrations live here.
Lambda handlers in src/handlers/ are thin wrappers that call into core/.
"""

__all__: list[str] = []

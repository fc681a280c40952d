"""
Business services for Greenleaf Bookings.

- repository.py: merge-on-write booking persistence and view/print/lock tracking
- index.py: best-effort index.json listing, full-scan fallback and rebuild
- workflow.py: admin stage workflow
- rate_guard.py: in-process sliding-window limiter
- export.py: CSV export
- printing.py: print HTML and QR rendering
- maintenance.py: bulk blob migration and cleanup
"""

__all__: list[str] = []

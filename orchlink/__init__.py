"""
orchlink - backend for an orchestra's member portal.

Concerts, attendance forms, sheet-music links with comment history,
rehearsal schedules and contact details, behind a two-role session gate.
"""

__version__ = "0.1.0"

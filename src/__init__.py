"""
SubTrack - Source Package

Recurring subscription tracking: next-due dates across billing cycles,
normalized monthly / yearly spend, due badges and calendar reminders.

DESIGN PRINCIPLES:
1. The recurrence engine is pure: "now" is always a parameter
2. Validate at the boundary, never inside the engine
3. Unknown billing cycles behave as monthly, everywhere
4. Every change is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "SubTrack Team"

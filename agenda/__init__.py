"""
Scheduling core of the clinic agenda.

Modules:
- conflicts: past-date and double-booking detection
- layout: lane packing of overlapping activities
- view: per-date calendar view model
- store: JSON-backed data access with a session cache
"""

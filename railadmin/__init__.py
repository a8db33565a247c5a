"""
Railway Ticketing Administration

Back office for a regional railway: station counters issue standard and
platform tickets, on-train examiners verify travel ids, and administrators
manage the station network, trains, staff and reports.
"""

__version__ = "1.0.0"

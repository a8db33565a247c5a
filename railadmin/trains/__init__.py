"""
Trains Module

Trains, their ordered route halts and weekly running days, plus the fare
and route resolver used when selling tickets.

Key Components:
- service.py: Train CRUD with halts and schedule
- fare_service.py: Travel classes, route resolution, schedule gating, fare tables
  and station-to-station distance
- router.py: FastAPI endpoints for train management and train search
- schemas.py: Pydantic models for request/response structures
"""

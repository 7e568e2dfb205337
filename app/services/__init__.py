"""
Service Organization
====================

**application/**
  Services managed by ServiceContainer, one instance per process.
  Examples: LogBookService, ChangeStatisticsService, TrendAnalyticsService

The container itself lives in ``container.py`` and selects the entry store
backend at build time.
"""

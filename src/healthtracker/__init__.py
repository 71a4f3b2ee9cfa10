"""
HealthTrackerAI - Health Tracking Backend

This package provides the backend services for the HealthTrackerAI
progressive web app: AI health chat, admin SMS and push messaging,
support tickets, and the PWA install/notification policies.
"""

__version__ = "0.1.0"
__author__ = "HealthTrackerAI Team"

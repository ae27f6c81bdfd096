"""
Service-wide constants
"""

SERVICE_NAME = "geofence-attendance"
DEFAULT_VERSION = "1.0.0"

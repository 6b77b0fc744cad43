"""
Constants for the offline queue and image cache
"""

SERVICE_NAME = "site-attendance-sync-agent"

# Punch types
PUNCH_IN = "PUNCH_IN"
PUNCH_OUT = "PUNCH_OUT"

# Image cache record-space
WORKER_PHOTOS_TABLE = "worker_photos"

# Key-value slot table
KV_STORE_TABLE = "kv_store"

MS_PER_DAY = 24 * 60 * 60 * 1000

"""Calculator version stamped on every cost breakdown."""

VERSION = "2026.10.1"

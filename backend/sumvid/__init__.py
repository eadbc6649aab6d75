"""SumVid backend: usage quotas and subscription entitlements."""

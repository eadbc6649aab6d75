"""Usage domain: per-user daily quotas.

Use Inject(QuotaServiceProtocol) in FastAPI endpoints for the singleton service.
"""

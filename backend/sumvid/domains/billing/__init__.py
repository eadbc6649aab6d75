"""Billing domain: Stripe checkout, webhook processing and entitlements."""

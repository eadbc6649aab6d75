"""Payment gateway adapters (Stripe, null, fake)."""

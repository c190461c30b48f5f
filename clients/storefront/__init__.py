"""Customer-facing storefront state and flows."""

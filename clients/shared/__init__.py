"""Shared building blocks for the storefront and POS clients."""

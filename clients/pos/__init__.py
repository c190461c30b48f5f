"""Point-of-sale dashboard state for store staff."""

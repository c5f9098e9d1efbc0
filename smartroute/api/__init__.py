"""HTTP surface for the quote service."""

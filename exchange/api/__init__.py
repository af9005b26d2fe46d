"""HTTP host runtime for the exchange."""

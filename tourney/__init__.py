"""Tournament director engine: clock, seating, balancing and payouts."""

__version__ = "0.1.0"

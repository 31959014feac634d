"""Core ledger, quote aggregation and rendering."""

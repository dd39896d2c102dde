"""Run records, percentiles, summaries and run comparison."""

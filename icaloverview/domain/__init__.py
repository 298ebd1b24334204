"""Calendar windows, bucketing, rendering and navigation."""

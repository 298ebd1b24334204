"""ICS ingestion: line unfolding, date interpretation and VEVENT extraction."""

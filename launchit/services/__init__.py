"""Domain services behind the submission API."""

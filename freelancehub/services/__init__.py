"""Domain services of the engagement lifecycle."""

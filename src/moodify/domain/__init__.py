"""Domain layer for Moodify."""

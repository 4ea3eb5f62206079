"""Small helpers shared across the todo sync package."""

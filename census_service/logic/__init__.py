"""Domain logic: answer resolution, document building and export."""

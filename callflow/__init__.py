"""CallFlow call-operations dashboard: board state store and completion proxy."""

"""Backend services for the workout parsing pipeline."""

"""process-scheduler command-line interface."""

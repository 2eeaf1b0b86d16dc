"""Network and registry adapters used by charthost."""

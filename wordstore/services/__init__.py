"""Service layer: the observable word store and its process-wide default."""

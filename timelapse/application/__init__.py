"""Application layer: use cases over the domain and its repository."""

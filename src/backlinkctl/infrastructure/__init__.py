"""Infrastructure layer: file I/O, path resolution, synchronization, graph."""

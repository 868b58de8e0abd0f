"""Plugin system: pluggy hook specs, discovery, and event dispatch."""

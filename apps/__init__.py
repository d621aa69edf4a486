"""Host applications built on the ncube engine."""

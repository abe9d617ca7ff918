"""Counter readers, one per metric family."""

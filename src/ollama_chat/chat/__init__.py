"""Chat turn handling: history window, prompt assembly, orchestration."""

"""modules — pipeline stages (input, planning, reoptimization, output) and their tools."""

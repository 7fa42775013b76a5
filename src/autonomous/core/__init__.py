"""Core subsystems: configuration, logging, prioritization, sessions."""

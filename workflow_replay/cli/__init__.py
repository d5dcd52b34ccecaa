"""Command line entry points: workflows, record, replay."""

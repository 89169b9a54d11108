"""Preforking worker pool supervisor for long-running job workers."""

"""Device runtime backends used by the local command executors."""

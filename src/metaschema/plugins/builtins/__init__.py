"""Built-in resolver plugins, registered by every plugin manager."""

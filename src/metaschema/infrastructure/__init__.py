"""Infrastructure layer — fragment loading and the assembled workspace.

This layer depends on the core layer and the plugin layer.
It must never import from services, commands, or output.
"""

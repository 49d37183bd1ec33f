"""Output layer — JSON and Rich rendering of ServiceResult.

Depends only on the service result contract; never on core internals.
"""

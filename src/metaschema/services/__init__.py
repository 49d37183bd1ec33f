"""Service layer — schema operations over an assembled workspace.

Every public service method returns a :class:`ServiceResult`. Services
depend on the core and infrastructure layers, never on commands or output.
"""

from metaschema.services.result import ServiceError, ServiceResult

__all__ = ["ServiceError", "ServiceResult"]

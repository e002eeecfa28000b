# Local inference model ownership

from .resource import ModelHandle, ModelLoadError, ModelResource, ModelState

__all__ = ["ModelHandle", "ModelLoadError", "ModelResource", "ModelState"]

"""
Shared model base
"""

from offerflow.core.common.base_model import BaseModel

__all__ = ["BaseModel"]

"""
Startups domain
"""

from offerflow.core.startups.models import Startup

__all__ = ["Startup"]

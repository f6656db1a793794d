"""
Resource plugins package.

Resource plugins reconcile one resource kind each. Third-party kinds are
discovered via Python entry points (group: 'nodeconf.resources').
"""

from plugins.resources.base import ResourcePlugin

__all__ = ["ResourcePlugin"]

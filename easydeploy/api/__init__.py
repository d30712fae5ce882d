"""
HTTP surface of the EasyDeploy backend
"""

from .app import create_app

__all__ = ['create_app']

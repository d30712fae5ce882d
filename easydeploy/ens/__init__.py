"""
ENS subname registration: namehash, contract accessors and the workflow
"""

from .config import EnsConfig
from .namehash import labelhash, namehash
from .workflow import RegistrationRequest, RegistrationResult, SubnameRegistrationWorkflow

__all__ = [
    'EnsConfig',
    'labelhash',
    'namehash',
    'RegistrationRequest',
    'RegistrationResult',
    'SubnameRegistrationWorkflow',
]

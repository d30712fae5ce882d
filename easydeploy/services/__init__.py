"""
Thin provider integrations: token generation, logo pinning, quotes, prices
"""

from .logo_storage import LogoStorage
from .prices import PriceService
from .quotes import OneInchClient, swap_link
from .token_generator import TokenGenerator, TokenSpec

__all__ = ['LogoStorage', 'PriceService', 'OneInchClient', 'swap_link', 'TokenGenerator', 'TokenSpec']

"""
Blueprints package
"""

from .payments import init_payments_blueprint

__all__ = ['init_payments_blueprint']

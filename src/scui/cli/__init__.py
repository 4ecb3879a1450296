"""
Command-line entry points for scui.
"""

from .main import main
from .deploy import main as deploy_main

__all__ = ['main', 'deploy_main']

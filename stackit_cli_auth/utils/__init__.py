"""Shared configuration for CLI credential lookup"""
from .config import Config, AuthEnvironment

__all__ = ['Config', 'AuthEnvironment']

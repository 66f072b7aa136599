"""API package for authenticating HTTP clients with CLI credentials"""
from .session import CredentialAuth, build_session

__all__ = ['CredentialAuth', 'build_session']

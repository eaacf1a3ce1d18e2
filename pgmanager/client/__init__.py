from .api import PGManagerClient, APIError, AuthenticationError

__all__ = ['PGManagerClient', 'APIError', 'AuthenticationError']

"""Python counterpart of the mobile app's data layer: API client, session and credential store."""
from .api import ApiClient
from .credentials import MemoryCredentialStore, FileCredentialStore
from .session import SessionContext
from .workshop import WorkshopClient

__all__ = ['ApiClient', 'MemoryCredentialStore', 'FileCredentialStore', 'SessionContext', 'WorkshopClient']

from quic_server.repositories.library_repository import LibraryRepository
from quic_server.repositories.user_repository import UserRepository

__all__ = ['LibraryRepository', 'UserRepository']

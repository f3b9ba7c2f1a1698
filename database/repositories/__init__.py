from database.repositories.base import BaseRepository
from database.repositories.creator import CreatorRepository

__all__ = ['BaseRepository', 'CreatorRepository']

"""
keysmith.backend — Внешний коллаборатор клиентского ядра.

Ядро (services/) зависит только от протоколов ``IdentityBackend`` и
``StorageBackend``. Здесь же лежит их self-hosted реализация:
``IdentityService`` + ``PasswordStorageService`` поверх репозиториев.
"""

from keysmith.backend.base import IdentityBackend, StorageBackend  # noqa: F401
from keysmith.backend.identity_service import IdentityService  # noqa: F401
from keysmith.backend.storage_service import PasswordStorageService  # noqa: F401

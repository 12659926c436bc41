from .storage_service import StorageService, get_storage_service

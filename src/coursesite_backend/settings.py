import os
import threading


def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ["true", "1", "yes", "on"]


class BackendSettings:
    _instance = None
    _lock = threading.Lock()

    def __init__(self):
        self.DEBUG_MODE = os.environ.get("DEBUG_MODE","development")
        self.DATABASE_URL = os.environ.get("DATABASE_URL", None)
        # Authentication settings
        self.APP_COOKIE_SALT = os.environ.get("APP_COOKIE_SALT", "")
        self.TEMP_PASSWORD_EXPIRE_SECONDS = int(os.environ.get("TEMP_PASSWORD_EXPIRE_SECONDS", "10800"))
        # Attachment storage
        self.MINIO_ENDPOINT = os.environ.get("MINIO_ENDPOINT", "localhost:9000")
        self.MINIO_ACCESS_KEY = os.environ.get("MINIO_ACCESS_KEY", "minioadmin")
        self.MINIO_SECRET_KEY = os.environ.get("MINIO_SECRET_KEY", "minioadmin")
        self.MINIO_SECURE = _flag("MINIO_SECURE", "false")
        self.MINIO_REGION = os.environ.get("MINIO_REGION", "us-east-1")
        self.MINIO_BUCKET = os.environ.get("MINIO_BUCKET", "coursesite-attachments")
        self.MINIO_MAX_UPLOAD_SIZE = int(os.environ.get("MINIO_MAX_UPLOAD_SIZE", str(20 * 1024 * 1024)))
        # Push relay
        self.PUSH_ENABLED = _flag("PUSH_ENABLED", "false")
        self.PUSH_HOST = os.environ.get("PUSH_HOST", "localhost")
        self.PUSH_HTTP_PORT = int(os.environ.get("PUSH_HTTP_PORT", "8081"))
        self.PUSH_SOCKET_PORT = int(os.environ.get("PUSH_SOCKET_PORT", "8082"))
        self.PUSH_AUTH_KEY = os.environ.get("PUSH_AUTH_KEY", "")
        self.PUSH_TIMEOUT = float(os.environ.get("PUSH_TIMEOUT", "2.0"))
        # Content
        self.IMPORTANT_WINDOW_DAYS = int(os.environ.get("IMPORTANT_WINDOW_DAYS", "14"))
        self.NOTIFICATION_LIMIT = int(os.environ.get("NOTIFICATION_LIMIT", "30"))
        self.NOTIFICATION_EXPIRE_DAYS = int(os.environ.get("NOTIFICATION_EXPIRE_DAYS", "180"))

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(BackendSettings, cls).__new__(cls)
        return cls._instance

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL

        postgres_url = os.environ.get("POSTGRES_URL")
        if postgres_url is None:
            return "sqlite:///coursesite.db"

        postgres_user = os.environ.get("POSTGRES_USER")
        postgres_password = os.environ.get("POSTGRES_PASSWORD")
        postgres_db = os.environ.get("POSTGRES_DB")
        return f"postgresql://{postgres_user}:{postgres_password}@{postgres_url}/{postgres_db}"

settings = BackendSettings()

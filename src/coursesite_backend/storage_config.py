"""
Attachment storage limits and content rules.
"""
from typing import Dict

from coursesite_backend.settings import settings

# Size limits
MAX_UPLOAD_SIZE = settings.MINIO_MAX_UPLOAD_SIZE

# Dangerous file signatures to block
DANGEROUS_SIGNATURES: Dict[bytes, str] = {
    b'MZ': 'Windows executable',
    b'\x7fELF': 'Linux executable',
    b'\xfe\xed\xfa\xce': 'Mach-O executable (32-bit)',
    b'\xfe\xed\xfa\xcf': 'Mach-O executable (64-bit)',
    b'\xce\xfa\xed\xfe': 'Mach-O executable (reverse)',
    b'\xcf\xfa\xed\xfe': 'Mach-O executable (reverse 64-bit)',
    b'\xca\xfe\xba\xbe': 'Java class file',
}

# Image signatures, used to pick inline vs. download responses
IMAGE_SIGNATURES: Dict[bytes, str] = {
    b'\x89PNG\r\n\x1a\n': 'image/png',
    b'\xff\xd8\xff': 'image/jpeg',
    b'GIF87a': 'image/gif',
    b'GIF89a': 'image/gif',
    b'BM': 'image/bmp',
}

# Object key for an attachment's bytes
ATTACHMENT_KEY_PATTERN = 'attachments/{attachment_id}.dat'


def format_bytes(bytes_size: int) -> str:
    """Format bytes to human readable string"""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if bytes_size < 1024.0:
            return f"{bytes_size:.2f} {unit}"
        bytes_size /= 1024.0
    return f"{bytes_size:.2f} TB"

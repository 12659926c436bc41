"""
Validation applied to attachment bytes before they are stored.
"""
import re
import logging
from typing import Optional, Tuple

from .storage_config import (
    MAX_UPLOAD_SIZE,
    DANGEROUS_SIGNATURES,
    IMAGE_SIGNATURES,
    format_bytes
)
from .api.exceptions import BadRequestException

logger = logging.getLogger(__name__)


def sanitize_filename(filename: str) -> str:
    """
    Reduce an uploaded filename to a safe display name.
    
    Path components are dropped, hidden-file dots replaced, and anything
    outside word characters, spaces, dots and hyphens removed.
    """
    if not filename or not filename.strip():
        return "unnamed_file"
    
    filename = filename.replace('\\', '/').split('/')[-1]
    
    if not filename:
        return "unnamed_file"
    
    if filename.startswith('.'):
        filename = '_' + filename.lstrip('.')
    
    filename = re.sub(r'[^\w\s.-]', '', filename, flags=re.UNICODE)
    filename = re.sub(r'\s+', '_', filename)
    filename = filename.strip('. ')
    
    name_parts = filename.rsplit('.', 1)
    if len(name_parts) == 2:
        name, ext = name_parts
        filename = f"{name[:100]}.{ext}"
    else:
        filename = filename[:100]
    
    if not filename or filename.strip('_') == '':
        filename = "unnamed_file"
    
    return filename


def validate_file_size(file_size: int) -> Tuple[bool, Optional[str]]:
    if file_size > MAX_UPLOAD_SIZE:
        return False, f"File size {format_bytes(file_size)} exceeds maximum allowed size of {format_bytes(MAX_UPLOAD_SIZE)}"
    
    if file_size == 0:
        return False, "Empty files are not allowed"
    
    return True, None


def check_file_content_security(data: bytes) -> Tuple[bool, Optional[str]]:
    header = data[:256]
    
    for signature, description in DANGEROUS_SIGNATURES.items():
        if header.startswith(signature):
            return False, f"File type not allowed: {description}"
    
    return True, None


def detect_image_type(data: bytes) -> Optional[str]:
    """Return the image MIME type for known image headers, None otherwise."""
    for signature, content_type in IMAGE_SIGNATURES.items():
        if data.startswith(signature):
            return content_type
    return None


def validate_attachment(data: bytes, filename: str) -> str:
    """
    Validate attachment bytes and return the sanitized filename.
    
    Raises:
        BadRequestException: If the size or content is not acceptable
    """
    safe_name = sanitize_filename(filename)
    
    is_valid, error = validate_file_size(len(data))
    if not is_valid:
        raise BadRequestException(error)
    
    is_safe, error = check_file_content_security(data)
    if not is_safe:
        logger.warning(f"Rejected attachment '{safe_name}': {error}")
        raise BadRequestException(error)
    
    return safe_name

import hashlib

from blogsite.conf import settings


def client_ip(request) -> str:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR") or "unknown"


def hash_ip(ip: str) -> str:
    return hashlib.sha256(f"{ip}{settings.BLOG_IP_HASH_SALT}".encode()).hexdigest()


def client_ip_hash(request) -> str:
    return hash_ip(client_ip(request))

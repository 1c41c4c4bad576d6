from django.conf import settings

# Salt mixed into client IPs before hashing
settings.BLOG_IP_HASH_SALT = getattr(
    settings, "BLOG_IP_HASH_SALT", "default-salt-change-in-production"
)

# Emails that are promoted to ADMIN on registration
settings.BLOG_ADMIN_EMAILS = getattr(settings, "BLOG_ADMIN_EMAILS", [])

# A repeated visit from the same IP counts again after this many hours
settings.BLOG_VIEW_WINDOW_HOURS = getattr(settings, "BLOG_VIEW_WINDOW_HOURS", 24)

# Unlinked images younger than this are never treated as orphans
settings.BLOG_ORPHAN_GRACE_HOURS = getattr(settings, "BLOG_ORPHAN_GRACE_HOURS", 24)

# Uploads

settings.BLOG_UPLOAD_MAX_BYTES = getattr(
    settings, "BLOG_UPLOAD_MAX_BYTES", 20 * 1024 * 1024
)
settings.BLOG_UPLOAD_ALLOWED_TYPES = getattr(
    settings,
    "BLOG_UPLOAD_ALLOWED_TYPES",
    ("image/jpeg", "image/png", "image/gif", "image/webp", "image/svg+xml"),
)

# Name of the entry in STORAGES that holds backup files
settings.BLOG_BACKUP_STORAGE = getattr(settings, "BLOG_BACKUP_STORAGE", "backups")

# Profile served by /api/author while no admin account exists
settings.BLOG_DEFAULT_AUTHOR = getattr(
    settings,
    "BLOG_DEFAULT_AUTHOR",
    {
        "name": "Blog Author",
        "title": "Software Engineer",
        "bio": "Writing down what I learn about infrastructure, automation and tooling.",
        "avatar": "",
        "github": "",
        "twitter": "",
        "linkedin": "",
        "website": "",
    },
)

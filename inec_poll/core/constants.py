"""Application constants.

This module contains magic strings and numbers used throughout the application.
Centralizing these values makes them easier to maintain and modify.
"""

# Election categories a poll can belong to
ELECTION_TYPES = (
    "Presidential",
    "Gubernatorial",
    "Senatorial",
    "House of Reps",
    "State Assembly",
)

NIGERIAN_STATES = (
    "Abia", "Adamawa", "Akwa Ibom", "Anambra", "Bauchi", "Bayelsa",
    "Benue", "Borno", "Cross River", "Delta", "Ebonyi", "Edo",
    "Ekiti", "Enugu", "FCT", "Gombe", "Imo", "Jigawa",
    "Kaduna", "Kano", "Katsina", "Kebbi", "Kogi", "Kwara",
    "Lagos", "Nasarawa", "Niger", "Ogun", "Ondo", "Osun",
    "Oyo", "Plateau", "Rivers", "Sokoto", "Taraba", "Yobe", "Zamfara",
)

# Poll field limits (mirrored by the column lengths in db/models)
MIN_CANDIDATES = 2
MAX_CANDIDATES = 10
MAX_TITLE_LENGTH = 500
MAX_DESCRIPTION_LENGTH = 2000
MAX_CANDIDATE_NAME_LENGTH = 255
MAX_PARTY_NAME_LENGTH = 100
MAX_STATE_LENGTH = 100
MAX_LGA_LENGTH = 100
MAX_URL_LENGTH = 500
MAX_EMAIL_LENGTH = 255

# Rate limit categories: action -> requests allowed per window
RATE_LIMITS = {
    "create_poll": 5,
    "vote": 10,
    "update_poll": 10,
    "delete_poll": 3,
    "general": 100,
}

# Headers added to every response by SecurityHeadersMiddleware
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Content-Security-Policy": (
        "default-src 'self'; img-src 'self' data: https:; font-src 'self' data:"
    ),
}

# User-facing error messages
AUTHENTICATION_REQUIRED = "Authentication required"
POLL_NOT_FOUND = "Poll not found"
OPTION_NOT_FOUND = "Option not found"
POLL_INACTIVE = "This poll is no longer active"
POLL_ENDED = "This poll has ended"
ALREADY_VOTED = "You have already voted on this poll"
NOT_POLL_OWNER_UPDATE = "You can only update your own polls"
NOT_POLL_OWNER_DELETE = "You can only delete your own polls"
RATE_LIMIT_EXCEEDED = "Rate limit exceeded. Please try again later."
INVALID_CSRF_TOKEN = "Invalid CSRF token"
EMAIL_IN_USE = "This email is already used by another profile"

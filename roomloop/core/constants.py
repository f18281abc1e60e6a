# Access codes
ACCESS_CODE_LENGTH = 6
ACCESS_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
ACCESS_CODE_MAX_ATTEMPTS = 10

# Room discovery
DEFAULT_STARTING_SOON_WINDOW_MINUTES = 30

# Lifecycle engine
DEFAULT_LIFECYCLE_INTERVAL_SECONDS = 60

# Authentication & Token Configuration
DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES = 60
DEFAULT_JWT_ALGORITHM = "HS256"

# Field limits
MAX_ROOM_NAME_LENGTH = 100
MAX_ROOM_TOPIC_LENGTH = 100
MAX_ROOM_DESCRIPTION_LENGTH = 1000
MAX_CHAT_MESSAGE_LENGTH = 2000

# Realtime events
EVENT_JOIN_ROOM = "join_room"
EVENT_LEAVE_ROOM = "leave_room"
EVENT_CHAT_MESSAGE = "chat:message"
EVENT_CHAT_MESSAGE_RECEIVED = "chat:message_received"
EVENT_PARTICIPANT_UPDATED = "room:participant_updated"

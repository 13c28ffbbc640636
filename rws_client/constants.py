# =============================================================================
# RWS Client -- Constants
# =============================================================================

# -- Timing (seconds) --------------------------------------------------------

DEFAULT_RECONNECT_INTERVAL = 30.0
DEFAULT_REPLY_TIMEOUT = 1.0
CONNECTION_TIMEOUT = 10.0
CLOSE_TIMEOUT = 5.0

# -- Queueing ------------------------------------------------------------------

DEFAULT_MAX_QUEUE_SECONDS = 0.0  # 0 = keep until reconnected

# -- Message ids ---------------------------------------------------------------

DEFAULT_ID_PREFIX = "message-id"

# -- Messages ------------------------------------------------------------------

MAX_MESSAGE_SIZE = 1_048_576  # 1 MB

# -- WebSocket close codes -----------------------------------------------------

WS_CLOSE_NORMAL = 1000
WS_CLOSE_ABNORMAL = 1006  # never sent on the wire, reported locally

# -- Error codes for ConnectionErrorInfo ---------------------------------------

ERROR_CODE_UNKNOWN = 0
ERROR_CODE_CONNECT_FAILED = 1
ERROR_CODE_TIMEOUT = 2
ERROR_CODE_HANDSHAKE = 3

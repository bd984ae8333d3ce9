"""Constants and configuration values for Vote4Us."""

# RPC configuration
DEFAULT_RPC_URL = 'https://mainnet.telos.net'
DEFAULT_CHAIN_ID = '4667b205c6838ef70ff7988f6e8257e8be0e1284a2f59699054a018f743b1d11'
DEFAULT_APP_NAME = 'Vote4Us'
RPC_TIMEOUT = 10  # seconds
RPC_RETRY_ATTEMPTS = 5
RPC_RETRY_DELAY = 2  # seconds

# Producer registry table
SYSTEM_ACCOUNT = 'eosio'
PRODUCERS_TABLE = 'producers'
PRODUCERS_TABLE_LIMIT = 1000
DEFAULT_EXPECTED_BPS = 100

# Voting rules
MAX_SELECTION_SIZE = 30  # protocol cap on simultaneous producer votes
VOTE_WEIGHT_DIVISOR = 10000
VOTE_ACTION_NAME = 'voteproducer'

# Statistics status values
STATUS_OK = 'ok'
STATUS_EMPTY = 'empty'
STATUS_NOT_FOUND = 'not_found'

# Substring of a wallet error message meaning the voter dismissed the signing request
CANCELLED_MARKER = 'cancelled'

"""Blockchain constants."""

# keccak256("Transfer(address,address,uint256)")
TRANSFER_TOPIC = (
    "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
)

# Function selectors
BALANCE_OF_SELECTOR = "0x70a08231"  # balanceOf(address)
TRANSFER_SELECTOR = "0xa9059cbb"  # transfer(address,uint256)

# Gas limit of a plain value transfer (21000 plus a small margin)
ETH_TRANSFER_GAS_LIMIT = 22000

# Block tags
LATEST = "latest"
PENDING = "pending"

# Event monitor defaults
DEFAULT_POLL_INTERVAL = 1.0  # seconds between eth_subscribe checks
DEFAULT_SUBSCRIPTION_ID = 1

import os
from dotenv import load_dotenv
from pathlib import Path
import bittensor as bt

env_path = Path(__file__).parents[1] / '.env'
load_dotenv(dotenv_path=env_path)

__version__ = "0.3.1"

# Snapshot storage
SNAPSHOT_ROOT = Path(os.getenv('SNAPSHOT_ROOT', str(Path(__file__).resolve().parents[2] / "reward_snapshots")))
ENABLE_REWARD_SNAPSHOTS = os.getenv('ENABLE_REWARD_SNAPSHOTS', 'False').lower() == 'true'

# Events log
EVENTS_LOG_DIR = os.getenv('EVENTS_LOG_DIR')
EVENTS_RETENTION_SIZE = int(os.getenv('EVENTS_RETENTION_SIZE', str(2 * 1024 * 1024)))

# Fixed-point precision
PERCENTAGE_DENOMINATOR = 100_000  # 100%
SCORE_PRECISION = 10 ** 18
MULTIPLIER_BASE = 100  # multiplier table values are percentages of 1.0

# Assets
SETTLEMENT_ASSET = os.getenv('SETTLEMENT_ASSET', 'VANA')
REWARD_ASSET = os.getenv('REWARD_ASSET', 'DLPT')

# Epoch rewards
EPOCH_REWARD_AMOUNT = int(os.getenv('EPOCH_REWARD_AMOUNT', str(1_000_000)))
REWARD_PERCENTAGE = int(os.getenv('REWARD_PERCENTAGE', str(PERCENTAGE_DENOMINATOR)))
NUMBER_OF_TOP_PARTICIPANTS = int(os.getenv('NUMBER_OF_TOP_PARTICIPANTS', '25'))

# Rating weights
STAKE_WEIGHT_PERCENTAGE = int(os.getenv('STAKE_WEIGHT_PERCENTAGE', str(30_000)))
PERFORMANCE_WEIGHT_PERCENTAGE = int(os.getenv('PERFORMANCE_WEIGHT_PERCENTAGE', str(70_000)))

# Stake multiplier curve, indexed by stake bucket
STAKE_BUCKET_SIZE = int(os.getenv('STAKE_BUCKET_SIZE', str(10_000)))
STAKE_MULTIPLIER_TABLE = (
    100, 102, 105, 107, 110, 112, 114, 117, 119, 121, 124, 126, 129, 131, 133,
    136, 138, 140, 143, 145, 148, 150, 156, 162, 168, 174, 180, 186, 192, 198,
    204, 210, 215, 221, 227, 233, 239, 245, 251, 257, 263, 269, 275, 276, 277,
    279, 280, 281, 282, 283, 285, 286, 287, 288, 289, 290, 292, 293, 294, 295,
    296, 298, 299, 300,
)

# Tranche schedule
NUMBER_OF_BLOCKS_BETWEEN_TRANCHES = int(os.getenv('NUMBER_OF_BLOCKS_BETWEEN_TRANCHES', str(17_280)))  # ~1 day of 5s blocks
NUMBER_OF_TRANCHES = int(os.getenv('NUMBER_OF_TRANCHES', '90'))
REMEDIATION_WINDOW = int(os.getenv('REMEDIATION_WINDOW', str(17_280 * 7)))

# Swap protection
MAXIMUM_SLIPPAGE_PERCENTAGE = int(os.getenv('MAXIMUM_SLIPPAGE_PERCENTAGE', str(2_000)))  # 2%

# Reference price feed
PRICE_FEED_URL = os.getenv('PRICE_FEED_URL', 'https://api.coingecko.com/api/v3/simple/price')
PRICE_FEED_IDS = {
    SETTLEMENT_ASSET: os.getenv('SETTLEMENT_ASSET_PRICE_ID', 'vana'),
    REWARD_ASSET: os.getenv('REWARD_ASSET_PRICE_ID', 'dlp-token'),
}
PRICE_FEED_API_KEY = os.getenv('PRICE_FEED_API_KEY')

# Rewards API
REWARDS_API_HOST = os.getenv('REWARDS_API_HOST', '0.0.0.0')
REWARDS_API_PORT = int(os.getenv('REWARDS_API_PORT', '8095'))

# Log out all non-sensitive config variables
bt.logging.info(f"SNAPSHOT_ROOT: {SNAPSHOT_ROOT}")
bt.logging.info(f"ENABLE_REWARD_SNAPSHOTS: {ENABLE_REWARD_SNAPSHOTS}")
bt.logging.info(f"SETTLEMENT_ASSET: {SETTLEMENT_ASSET}")
bt.logging.info(f"REWARD_ASSET: {REWARD_ASSET}")
bt.logging.info(f"EPOCH_REWARD_AMOUNT: {EPOCH_REWARD_AMOUNT}")
bt.logging.info(f"REWARD_PERCENTAGE: {REWARD_PERCENTAGE}/{PERCENTAGE_DENOMINATOR}")
bt.logging.info(f"NUMBER_OF_TOP_PARTICIPANTS: {NUMBER_OF_TOP_PARTICIPANTS}")
bt.logging.info(f"STAKE_WEIGHT_PERCENTAGE: {STAKE_WEIGHT_PERCENTAGE}")
bt.logging.info(f"PERFORMANCE_WEIGHT_PERCENTAGE: {PERFORMANCE_WEIGHT_PERCENTAGE}")
bt.logging.info(f"STAKE_BUCKET_SIZE: {STAKE_BUCKET_SIZE}")
bt.logging.info(f"NUMBER_OF_BLOCKS_BETWEEN_TRANCHES: {NUMBER_OF_BLOCKS_BETWEEN_TRANCHES}")
bt.logging.info(f"NUMBER_OF_TRANCHES: {NUMBER_OF_TRANCHES}")
bt.logging.info(f"REMEDIATION_WINDOW: {REMEDIATION_WINDOW}")
bt.logging.info(f"MAXIMUM_SLIPPAGE_PERCENTAGE: {MAXIMUM_SLIPPAGE_PERCENTAGE}")
bt.logging.info(f"PRICE_FEED_URL: {PRICE_FEED_URL}")
bt.logging.info(f"REWARDS_API_PORT: {REWARDS_API_PORT}")

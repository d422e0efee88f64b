"""
Utilities for saving and loading reward snapshots.

A snapshot freezes an epoch's ranking and reward records after each
initialization or distribution run. The read-only API serves the most
recent one.
"""

import json
from pathlib import Path
from datetime import datetime
from typing import Dict, Optional, Tuple
import bittensor as bt

from dlprewards.deployer.utils.config import SNAPSHOT_ROOT


def _snapshot_dir(root: Optional[Path]) -> Path:
    return Path(root) if root is not None else SNAPSHOT_ROOT


def save_reward_snapshot(epoch_id: int, snapshot_data: Dict, root: Optional[Path] = None) -> str:
    """
    Save a reward snapshot for an epoch.

    Args:
        epoch_id: Epoch identifier
        snapshot_data: Dict with keys: epoch_id, created_at, config_version, ranking, rewards
        root: Snapshot directory (defaults to SNAPSHOT_ROOT)

    Returns:
        Path to saved snapshot file
    """
    snapshot_dir = _snapshot_dir(root)
    snapshot_dir.mkdir(parents=True, exist_ok=True)

    timestamp_str = datetime.now().strftime("%Y.%m.%d_%H.%M.%S.%f")
    output_file = snapshot_dir / f"epoch_{epoch_id}_{timestamp_str}.json"

    with open(output_file, 'w') as f:
        json.dump(snapshot_data, f, indent=2)

    bt.logging.debug(f"Saved reward snapshot to {output_file}")

    return str(output_file)


def load_reward_snapshot(epoch_id: int, root: Optional[Path] = None) -> Tuple[Dict, str]:
    """
    Load the most recent reward snapshot of an epoch.

    Returns:
        Tuple of (snapshot_data, file_path)

    Raises:
        FileNotFoundError: If no snapshot exists for this epoch
    """
    snapshot_dir = _snapshot_dir(root)

    if not snapshot_dir.exists():
        raise FileNotFoundError(f"Reward snapshot directory {snapshot_dir} does not exist")

    matching_files = list(snapshot_dir.glob(f"epoch_{epoch_id}_*.json"))
    if not matching_files:
        raise FileNotFoundError(f"No reward snapshot found for epoch {epoch_id}")

    # Timestamped names sort chronologically
    latest_file = max(matching_files, key=lambda f: f.name)

    bt.logging.debug(f"Loading reward snapshot from: {latest_file}")

    with open(latest_file, 'r') as f:
        data = json.load(f)

    return data, str(latest_file)

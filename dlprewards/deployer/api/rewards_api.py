"""
Simple read-only API for exposing epoch rankings and reward progress.
Serves the latest saved reward snapshot; includes rate limiting for
protection against abuse.
"""
from fastapi import FastAPI, HTTPException, Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from pathlib import Path
import numpy as np
from typing import Dict, List
import uvicorn

from dlprewards.deployer.utils.config import PERCENTAGE_DENOMINATOR, REWARDS_API_HOST, REWARDS_API_PORT, SNAPSHOT_ROOT
from dlprewards.deployer.reward_engine.utils.reward_snapshot import load_reward_snapshot


# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(title="DLP Rewards API", version="1.0.0")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def get_snapshot_root() -> Path:
    """Directory the reward deployer writes snapshots to."""
    return SNAPSHOT_ROOT


def load_snapshot(epoch_id: int) -> Dict:
    """Load the latest snapshot of an epoch from disk."""
    data, _ = load_reward_snapshot(epoch_id, root=get_snapshot_root())
    return data


def share_fractions(ranking_entries: List[Dict]) -> np.ndarray:
    """Share percentages as fractions of 1.0."""
    shares = np.array([e["share_percentage"] for e in ranking_entries], dtype=np.float64)
    return shares / PERCENTAGE_DENOMINATOR


@app.get("/health")
@limiter.limit("60/minute")
async def health_check(request: Request):
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/epochs/{epoch_id}/ranking")
@limiter.limit("10/minute")
async def get_ranking(epoch_id: int, request: Request) -> Dict:
    """
    Get the top-K ranking of an epoch.
    Rate limit: 10 requests per minute per IP.
    """
    try:
        snapshot = load_snapshot(epoch_id)
        entries = snapshot["ranking"]["entries"]
        fractions = share_fractions(entries)

        return {
            "epoch_id": epoch_id,
            "config_version": snapshot.get("config_version"),
            "total_participants": len(entries),
            "entries": entries,
            "share_fractions": [float(x) for x in fractions]
        }

    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error loading ranking: {str(e)}")


@app.get("/epochs/{epoch_id}/rewards")
@limiter.limit("10/minute")
async def get_rewards(epoch_id: int, request: Request) -> Dict:
    """
    Get every participant's reward record and the epoch summary.
    Rate limit: 10 requests per minute per IP.
    """
    try:
        snapshot = load_snapshot(epoch_id)
        return {
            "epoch_id": epoch_id,
            "created_at": snapshot.get("created_at"),
            "summary": snapshot.get("summary", {}),
            "rewards": snapshot["rewards"]
        }

    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error loading rewards: {str(e)}")


@app.get("/epochs/{epoch_id}/rewards/{participant_id}")
@limiter.limit("20/minute")
async def get_participant_reward(epoch_id: int, participant_id: int, request: Request) -> Dict:
    """
    Get the reward record of one participant.
    Rate limit: 20 requests per minute per IP.
    """
    try:
        snapshot = load_snapshot(epoch_id)
        for record in snapshot["rewards"]:
            if record["participant_id"] == participant_id:
                return record

        raise HTTPException(
            status_code=404,
            detail=f"Participant {participant_id} not found in epoch {epoch_id}"
        )

    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error loading reward: {str(e)}")


def run_api(host: str = REWARDS_API_HOST, port: int = REWARDS_API_PORT):
    """Run the rewards API server."""
    uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    run_api()

"""Configuration for the route optimization server, read from the environment."""
import os

from dotenv import load_dotenv

from tourplan.solver import NEAREST_NEIGHBOR, STRATEGIES

load_dotenv()


def get_port():
    """Get port configuration."""
    return int(os.getenv("PORT", 5000))


def get_log_level():
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_solver_config():
    """Get default strategy and OR-Tools time limit."""
    strategy = os.getenv("ROUTE_STRATEGY", NEAREST_NEIGHBOR)
    if strategy not in STRATEGIES:
        raise ValueError(f"ROUTE_STRATEGY must be one of {', '.join(STRATEGIES)}, got {strategy!r}")
    return {
        "strategy": strategy,
        "max_solve_seconds": int(os.getenv("MAX_SOLVE_SECONDS", "5")),
    }

"""
Network configuration for the CLMM tick-map tooling.

Contains Solana cluster RPC endpoints and request settings.
Values can be overridden from the environment (or a .env file loaded by
the CLI).
"""

import os
from typing import Any


# =============================================================================
# CLUSTER CONFIGURATIONS
# =============================================================================

CLUSTERS: dict[str, dict[str, Any]] = {
    "mainnet-beta": {
        "name": "Solana Mainnet Beta",
        "rpc_urls": [
            "https://api.mainnet-beta.solana.com",
            "https://solana-rpc.publicnode.com",
        ],
    },
    "devnet": {
        "name": "Solana Devnet",
        "rpc_urls": [
            "https://api.devnet.solana.com",
        ],
    },
}

DEFAULT_CLUSTER: str = "mainnet-beta"
DEFAULT_RPC_URL: str = CLUSTERS[DEFAULT_CLUSTER]["rpc_urls"][0]


# =============================================================================
# REQUEST SETTINGS
# =============================================================================

REQUEST_TIMEOUT: float = float(os.getenv("RPC_TIMEOUT", "30"))  # seconds
RPC_BATCH_SIZE: int = 100  # getMultipleAccounts limit
RPC_THREADS: int = int(os.getenv("RPC_THREADS", str(min(8, os.cpu_count() or 4))))


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_cluster_config(cluster: str | None = None) -> dict[str, Any]:
    """Get configuration for a Solana cluster.

    Args:
        cluster: Cluster name (e.g., 'mainnet-beta', 'devnet').
                 If None, uses SOLANA_CLUSTER environment variable or
                 defaults to 'mainnet-beta'.

    Returns:
        Cluster configuration dictionary.

    Raises:
        ValueError: If cluster is not supported.
    """
    if cluster is None:
        cluster = os.getenv("SOLANA_CLUSTER", DEFAULT_CLUSTER)

    cluster = cluster.lower()
    if cluster not in CLUSTERS:
        raise ValueError(f"Unsupported cluster: {cluster}. Supported: {list(CLUSTERS.keys())}")

    return CLUSTERS[cluster]


def get_rpc_url(rpc_url: str | None = None, cluster: str | None = None) -> str:
    """Resolve the RPC endpoint.

    An explicit URL wins, then SOLANA_RPC_URL / RPC_URL from the
    environment, then the first default for the cluster.
    """
    if rpc_url:
        return rpc_url

    env_rpc = os.getenv("SOLANA_RPC_URL") or os.getenv("RPC_URL")
    if env_rpc:
        return env_rpc

    config = get_cluster_config(cluster)
    return config["rpc_urls"][0]

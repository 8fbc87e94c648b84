"""
Configuration package for the CLMM tick-map tooling.
"""

from clmm_tickmap.config.network import (
    CLUSTERS,
    DEFAULT_CLUSTER,
    DEFAULT_RPC_URL,
    REQUEST_TIMEOUT,
    RPC_BATCH_SIZE,
    RPC_THREADS,
    get_cluster_config,
    get_rpc_url,
)

from clmm_tickmap.config.protocol import (
    RAYDIUM_CLMM_PROGRAM_ID,
    TICK_ARRAY_SEED,
    TICK_ARRAY_BITMAP_EXTENSION_SEED,
    ACCOUNT_DISCRIMINATOR_SIZE,
    Q_RATIO,
    TICK_ARRAY_SIZE,
    MIN_TICK,
    MAX_TICK,
    Q64,
    BITS_PER_WORD,
    DEFAULT_BITMAP_WORDS,
    DEFAULT_BITMAP_CENTER,
    EXTENSION_CHUNKS,
    WORDS_PER_CHUNK,
    BITS_PER_CHUNK,
    MIN_BITMAP_OFFSET,
    MAX_BITMAP_OFFSET,
)

from clmm_tickmap.config.logging_config import (
    setup_logger,
    get_cli_logger,
)

__all__ = [
    # Network
    'CLUSTERS',
    'DEFAULT_CLUSTER',
    'DEFAULT_RPC_URL',
    'REQUEST_TIMEOUT',
    'RPC_BATCH_SIZE',
    'RPC_THREADS',
    'get_cluster_config',
    'get_rpc_url',

    # Protocol
    'RAYDIUM_CLMM_PROGRAM_ID',
    'TICK_ARRAY_SEED',
    'TICK_ARRAY_BITMAP_EXTENSION_SEED',
    'ACCOUNT_DISCRIMINATOR_SIZE',
    'Q_RATIO',
    'TICK_ARRAY_SIZE',
    'MIN_TICK',
    'MAX_TICK',
    'Q64',
    'BITS_PER_WORD',
    'DEFAULT_BITMAP_WORDS',
    'DEFAULT_BITMAP_CENTER',
    'EXTENSION_CHUNKS',
    'WORDS_PER_CHUNK',
    'BITS_PER_CHUNK',
    'MIN_BITMAP_OFFSET',
    'MAX_BITMAP_OFFSET',

    # Logging
    'setup_logger',
    'get_cli_logger',
]

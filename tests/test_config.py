"""
Tests for network and logging configuration.
"""

import logging
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler

import pytest

from clmm_tickmap.config.logging_config import get_cli_logger, get_log_dir, setup_logger
from clmm_tickmap.config.network import (
    DEFAULT_RPC_URL,
    get_cluster_config,
    get_rpc_url,
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("SOLANA_RPC_URL", "RPC_URL", "SOLANA_CLUSTER", "CLMM_TICKMAP_LOG_DIR"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestNetworkConfig:

    def test_explicit_url_wins(self, clean_env):
        clean_env.setenv("SOLANA_RPC_URL", "http://env:8899")
        assert get_rpc_url("http://explicit:8899") == "http://explicit:8899"

    def test_env_url(self, clean_env):
        clean_env.setenv("RPC_URL", "http://fallback:8899")
        assert get_rpc_url() == "http://fallback:8899"
        clean_env.setenv("SOLANA_RPC_URL", "http://env:8899")
        assert get_rpc_url() == "http://env:8899"

    def test_cluster_default(self, clean_env):
        assert get_rpc_url() == DEFAULT_RPC_URL
        assert get_rpc_url(cluster="devnet") == "https://api.devnet.solana.com"

    def test_cluster_from_env(self, clean_env):
        clean_env.setenv("SOLANA_CLUSTER", "DEVNET")
        assert get_cluster_config()["name"] == "Solana Devnet"

    def test_unsupported_cluster(self, clean_env):
        with pytest.raises(ValueError):
            get_cluster_config("testnet-x")


class TestLoggingConfig:

    def test_no_log_dir_by_default(self, clean_env):
        assert get_log_dir() is None
        logger = setup_logger("clmm_tickmap.test.console_only")
        assert [type(h) for h in logger.handlers] == [logging.StreamHandler]

    def test_file_handlers_with_log_dir(self, clean_env, tmp_path):
        clean_env.setenv("CLMM_TICKMAP_LOG_DIR", str(tmp_path / "logs"))
        logger = setup_logger("clmm_tickmap.test.files", console=False)
        try:
            kinds = {type(h) for h in logger.handlers}
            assert kinds == {TimedRotatingFileHandler, RotatingFileHandler}
            assert (tmp_path / "logs").is_dir()
        finally:
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)

    def test_repeat_setup_reuses_handlers(self, clean_env):
        first = setup_logger("clmm_tickmap.test.repeat")
        second = setup_logger("clmm_tickmap.test.repeat", level=logging.DEBUG)
        assert first is second
        assert len(second.handlers) == 1
        assert second.level == logging.DEBUG

    def test_cli_logger_levels(self, clean_env):
        assert get_cli_logger(debug=True).level == logging.DEBUG
        assert get_cli_logger(debug=False).level == logging.WARNING

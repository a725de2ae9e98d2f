import logging

import pytest

from sigtool.lib import log
from sigtool.lib.key_store import MemoryKeyStore
from sigtool.lib.schemes import Scheme
from sigtool.lib.signing_service import SigningService


@pytest.fixture
def info_logging():
    log.set_level("INFO")
    yield
    log.set_level("WARNING")


def test_context_is_appended_to_message(info_logging, caplog):
    logger = log.get_logger("test")

    with caplog.at_level(logging.INFO, logger="sigtool"):
        logger.info("Saved key", name="alice", scheme=Scheme.BLS)

    assert caplog.records[-1].name == "sigtool.test"
    assert caplog.records[-1].getMessage() == "Saved key | name=alice scheme=bls"


def test_set_level_controls_hierarchy():
    log.set_level("DEBUG")
    try:
        assert logging.getLogger("sigtool").level == logging.DEBUG
        assert logging.getLogger("sigtool.key_store").isEnabledFor(logging.DEBUG)
    finally:
        log.set_level("WARNING")
    assert not logging.getLogger("sigtool.key_store").isEnabledFor(logging.INFO)


def test_keygen_logs_without_private_material(info_logging, caplog, entropy):
    service = SigningService(MemoryKeyStore(), entropy=entropy)

    with caplog.at_level(logging.INFO, logger="sigtool"):
        record = service.keygen("alice", Scheme.ECDSA)

    assert "Generated key | name=alice scheme=ecdsa" in caplog.text
    assert record.private_key.hex() not in caplog.text

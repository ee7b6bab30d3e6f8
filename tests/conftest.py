"""Shared fixtures and logging setup for the mediaproxy tests."""

import logging
import sys

import pytest

from mediaproxy import EventEmitter, MediaObject

from .fixtures.recording_gateway import RecordingGateway


def pytest_configure(config):
    level = logging.DEBUG if config.getoption("--debug-mediaproxy") else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    logging.getLogger("mediaproxy").setLevel(level)


def pytest_addoption(parser):
    parser.addoption(
        "--debug-mediaproxy",
        action="store_true",
        default=False,
        help="Log every RPC request and subscription ledger update",
    )


@pytest.fixture
def client():
    """Stands in for the factory that creates media objects."""
    return EventEmitter()


@pytest.fixture
def gateway():
    """Gateway completing every request synchronously."""
    return RecordingGateway()


@pytest.fixture
def deferred_gateway():
    """Gateway that records requests and leaves them pending."""
    return RecordingGateway(auto_complete=False)


@pytest.fixture
def media_object(client, gateway):
    """Media object ``obj-1`` wired to the synchronous gateway."""
    return gateway.attach(MediaObject("obj-1", client))


@pytest.fixture
def deferred_object(client, deferred_gateway):
    """Media object ``obj-2`` wired to the deferred gateway."""
    return deferred_gateway.attach(MediaObject("obj-2", client))

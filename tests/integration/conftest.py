# tests/integration/conftest.py
"""Shared fixtures for integration tests using testcontainers.

Container lifecycle:
- session scope: containers start once per pytest session
- function scope: fresh database / key prefix per test for isolation

Containers are reached through their bridge network IP and internal port,
which works from inside a devcontainer with docker-outside-of-docker. Set
TESTCONTAINERS_USE_MAPPED_PORTS=1 to use the host and mapped port instead
(Docker Desktop).
"""

from __future__ import annotations

import logging
import os
import time
import uuid

import pytest

logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "mongodb: marks tests requiring MongoDB container")
    config.addinivalue_line("markers", "redis: marks tests requiring Redis container")


# =====================================================================
#  DOCKER HELPERS
# =====================================================================

def _get_container_bridge_ip(container, max_attempts: int = 10) -> str:
    """Get container bridge network IP with retries."""
    for attempt in range(max_attempts):
        wrapped = container.get_wrapped_container()
        wrapped.reload()
        networks = wrapped.attrs.get("NetworkSettings", {}).get("Networks", {})
        for net_name, net_info in networks.items():
            ip = net_info.get("IPAddress", "")
            if ip:
                logger.info(
                    "Container %s IP: %s (network: %s, attempt %d)",
                    wrapped.short_id, ip, net_name, attempt + 1,
                )
                return ip
        logger.debug("Container IP empty, attempt %d/%d", attempt + 1, max_attempts)
        time.sleep(0.5)

    raise RuntimeError(
        f"Could not obtain container bridge IP after {max_attempts} attempts"
    )


def _container_address(container, internal_port: int) -> tuple[str, int]:
    if os.environ.get("TESTCONTAINERS_USE_MAPPED_PORTS") == "1":
        return container.get_container_host_ip(), int(container.get_exposed_port(internal_port))
    return _get_container_bridge_ip(container), internal_port


def _docker_available() -> bool:
    """Check if Docker daemon is reachable."""
    try:
        import docker
        client = docker.from_env()
        client.ping()
        return True
    except Exception:
        return False


# =====================================================================
#  MONGODB CONTAINER (session scope)
# =====================================================================

MONGO_IMAGE = "mongo:7.0"
MONGO_INTERNAL_PORT = 27017


@pytest.fixture(scope="session")
def mongodb_container():
    if not _docker_available():
        pytest.skip("Docker not available")

    from testcontainers.core.container import DockerContainer
    from testcontainers.core.waiting_utils import wait_for_logs

    container = DockerContainer(MONGO_IMAGE).with_exposed_ports(MONGO_INTERNAL_PORT)
    container.start()
    wait_for_logs(container, predicate=r"Waiting for connections", timeout=60)

    host, port = _container_address(container, MONGO_INTERNAL_PORT)
    logger.info("MongoDB ready at %s:%d", host, port)
    yield {"host": host, "port": port}
    container.stop()


@pytest.fixture(scope="session")
def mongodb_url(mongodb_container) -> str:
    c = mongodb_container
    return f"mongodb://{c['host']}:{c['port']}"


@pytest.fixture
def mongodb_database() -> str:
    return f"test_{uuid.uuid4().hex[:8]}"


# =====================================================================
#  REDIS CONTAINER (session scope)
# =====================================================================

REDIS_IMAGE = "redis:7-alpine"
REDIS_INTERNAL_PORT = 6379


@pytest.fixture(scope="session")
def redis_container():
    if not _docker_available():
        pytest.skip("Docker not available")

    from testcontainers.core.container import DockerContainer
    from testcontainers.core.waiting_utils import wait_for_logs

    container = DockerContainer(REDIS_IMAGE).with_exposed_ports(REDIS_INTERNAL_PORT)
    container.start()
    wait_for_logs(container, predicate=r"Ready to accept connections", timeout=30)

    host, port = _container_address(container, REDIS_INTERNAL_PORT)
    logger.info("Redis ready at %s:%d", host, port)
    yield {"host": host, "port": port}
    container.stop()


@pytest.fixture(scope="session")
def redis_url(redis_container) -> str:
    c = redis_container
    return f"redis://{c['host']}:{c['port']}/0"


@pytest.fixture
def redis_key_prefix() -> str:
    return f"test:{uuid.uuid4().hex[:8]}:"

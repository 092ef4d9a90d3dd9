import logging

import pytest

from filepatcher.core.lifecycle import PatchLifecycleManager


@pytest.fixture(autouse=True)
def reset_cli_logging():
    yield
    logger = logging.getLogger("filepatcher")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def manager(tmp_path):
    return PatchLifecycleManager(storage_root=tmp_path / "store")


def write(path, text):
    path.write_text(text, encoding="utf-8", newline="")
    return path


def read(path):
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()

import logging
import pathlib
import site

import pytest

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture
def diagnostics(caplog):
    """Capture diagnostic records emitted by the error classifier."""
    caplog.set_level(logging.ERROR, logger='dbwrap.classifier')

    def records():
        return [r for r in caplog.records if r.name == 'dbwrap.classifier']

    return records


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.sqlite',
]

import pytest

from .fakes import FULL_EVENT


@pytest.fixture
def full_event():
    return dict(FULL_EVENT, userIdentity=dict(FULL_EVENT["userIdentity"]))

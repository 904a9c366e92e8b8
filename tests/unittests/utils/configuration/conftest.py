import pytest


@pytest.fixture
def minimal_definition_dict():
    """A dictionary with every section present, but empty."""
    return {"node": {}, "account": {}, "contract": {}, "transfer": {}, "settings": {}}

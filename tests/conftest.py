import pytest
from hypothesis import settings

from sample_data import sample_builder

# Hypothesis profiles for property-based tests
settings.register_profile("fast", max_examples=50, deadline=None)
settings.register_profile("thorough", max_examples=1000, deadline=None)
settings.load_profile("fast")


@pytest.fixture
def builder():
    return sample_builder()


@pytest.fixture
def sample_pdb(builder) -> bytes:
    return builder.build()

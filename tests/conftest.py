import pytest

from tests.factories import make_faculty, make_student


@pytest.fixture
def student():
    return make_student()


@pytest.fixture
def faculty():
    return make_faculty()

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import pytest

from semantic_dict import default_dictionary


@pytest.fixture
def dictionary():
    return default_dictionary()


@pytest.fixture
def known_words(dictionary):
    return dictionary.known_words()

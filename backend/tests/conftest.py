from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
sys.path.insert(0, str(Path(__file__).resolve().parent))

import pytest
from pymongo.errors import OperationFailure

from cookie_codec.codec import generate_random_key
from fakes import MAX_AGE, FakeCollection
from mongostore.store import MongoStore


@pytest.fixture
def collection():
    return FakeCollection()


@pytest.fixture
def key_pair():
    return generate_random_key(32), generate_random_key(32)


@pytest.fixture
def store(collection, key_pair):
    return MongoStore(collection, MAX_AGE, *key_pair)


@pytest.fixture
def db_error():
    return OperationFailure("not authorized")

"""
Shared fixtures: a MagicMock Redis client that keeps its keys in a dict
"""
import fnmatch
import os
import sys
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def make_redis_mock():
    keys = {}
    client = MagicMock()
    client.keys_store = keys

    def set_key(key, value, ex=None):
        keys[key] = value
        return True

    def delete(*names):
        return sum(1 for name in names if keys.pop(name, None) is not None)

    def scan_iter(match="*"):
        return [key for key in list(keys) if fnmatch.fnmatch(key, match)]

    client.get.side_effect = keys.get
    client.set.side_effect = set_key
    client.delete.side_effect = delete
    client.scan_iter.side_effect = scan_iter
    client.ttl.return_value = 600
    return client


@pytest.fixture
def redis_client():
    return make_redis_mock()

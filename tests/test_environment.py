"""Tests for the environment identity."""

import pytest

from cfp.constants import env_names
from cfp.environment import Environment


def test_independently_constructed_environments_are_equal():
    assert Environment("production") == Environment.from_name(env_names.PRODUCTION)
    assert Environment("production").equals(Environment.from_name("production"))


def test_different_environments_are_never_equal():
    assert Environment.PRODUCTION != Environment.DEVELOPMENT
    assert not Environment.PRODUCTION.equals(Environment.DEVELOPMENT)
    assert not Environment.TESTING.equals(Environment.PRODUCTION)


def test_equals_accepts_names():
    assert Environment.TESTING.equals("testing")
    assert not Environment.TESTING.equals("production")


@pytest.mark.parametrize("name", ["Development", " development ", "DEVELOPMENT"])
def test_from_name_normalizes_the_name(name):
    assert Environment.from_name(name) is Environment.DEVELOPMENT


def test_from_name_rejects_unknown_environments():
    with pytest.raises(ValueError, match="staging"):
        Environment.from_name("staging")


def test_str_is_the_environment_name():
    assert str(Environment.TESTING) == "testing"

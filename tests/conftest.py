"""Shared doubles and real classes for mockingbird tests."""

import pytest

from mockingbird import Double, sing, state_of

pytest_plugins = ("mockingbird.pytest_plugin",)


class User(Double):
    @sing.singleton
    def find(cls, id):
        return cls(id)

    @sing
    def __init__(self, id):
        self.id = id

    id = sing()
    name = sing(default="Josh")
    address = sing()
    phone_numbers = sing(initial=[])

    @sing
    def add_phone_number(self, area_code, number):
        state_of(self)["phone_numbers"].append([area_code, number])


class RealUser:
    @classmethod
    def find(cls, id):
        return cls(id)

    def __init__(self, id):
        self._id = id

    def id(self):
        return self._id

    def name(self):
        return "Real"

    def address(self):
        return "1 Real Rd."

    def phone_numbers(self):
        return []

    def add_phone_number(self, area_code, number):
        pass


@pytest.fixture
def user_prototype():
    return User


@pytest.fixture
def user_class(reprise):
    return reprise(User)


@pytest.fixture
def real_user_class():
    return RealUser

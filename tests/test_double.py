"""Tests for declaring doubles on classes, reprises and ledger queries."""

import pytest
from mockingbird import (
    DeclarationError,
    Double,
    Raise,
    Surface,
    UndeclaredOperationError,
    UnpreparedOperationError,
    declare,
    initialized_with,
    invocations,
    sing,
    state_of,
    times_told,
    times_told_with,
    told_before,
    told_with,
    was_asked_for,
)


class TestSingletonSurface:
    def test_single_override(self, user_class):
        user_class.will_find("user1")
        assert user_class.find(1) == "user1"
        assert user_class.find(2) == "user1"

    def test_queue_then_default_body(self, user_class, user_prototype):
        user_class.will_find_queue("a", "b", "c")
        assert user_class.find(1) == "a"
        assert user_class.find(2) == "b"
        assert user_class.find(3) == "c"
        user = user_class.find(4)
        assert isinstance(user, user_prototype)
        assert times_told(user_class, "find") == 4

    def test_queue_falls_back_to_single(self, user_class):
        user_class.will_find("single")
        user_class.will_find_queue("a")
        assert [user_class.find(n) for n in (1, 2, 3)] == ["a", "single", "single"]

    def test_told_with_and_order(self, user_class):
        for n in (11, 22, 33, 44):
            user_class.find(n)
        assert told_with(user_class, "find", 11)
        assert told_with(user_class, "find", 44)
        assert not told_with(user_class, "find", 123123123)
        assert times_told_with(user_class, "find", 22) == 1
        assert told_before(user_class, ("find", (11,)), ("find", (22,)))
        assert not told_before(user_class, ("find", (44,)), ("find", (11,)))

    def test_will_have_on_class(self, user_class):
        user_class.will_have("find", "found")
        assert user_class.find(1) == "found"

    def test_raise_override(self, user_class):
        user_class.will_find(Raise(LookupError("no such user")))
        with pytest.raises(LookupError):
            user_class.find(1)
        assert times_told(user_class, "find") == 1


class TestInstanceSurface:
    def test_initialized_with(self, user_class):
        user = user_class.find(123)
        assert initialized_with(user).args == (123,)
        assert initialized_with(user).kwargs == {}
        assert initialized_with(user_class) is None
        assert times_told(user, "__init__") == 1

    def test_accessor_reads_state_set_by_initializer(self, user_class):
        user = user_class.find(123)
        assert not was_asked_for(user, "id")
        assert user.id() == 123
        assert was_asked_for(user, "id")

    def test_will_have_generated_setter(self, user_class):
        user = user_class(1)
        assert user.will_name("Bill") is user
        assert user.name() == "Bill"
        assert was_asked_for(user, "name")

    def test_will_have_prefixed_setter(self, user_class):
        user = user_class(1)
        assert user.will_have_name("Bill") is user
        assert user.name() == "Bill"

    def test_default_used_when_provided(self, user_prototype):
        assert user_prototype(1).name() == "Josh"

    def test_unprepared_accessor(self, user_prototype):
        with pytest.raises(UnpreparedOperationError, match="address"):
            user_prototype(1).address()

    def test_will_have_prepares_accessor(self, user_prototype):
        assert user_prototype(1).will_have("address", "123 Fake St.").address() == "123 Fake St."

    def test_multiple_arguments_and_state_owned_by_body(self, user_class):
        user = user_class(1)
        assert user.phone_numbers() == []
        assert user.add_phone_number("123", "456-7890") is None
        assert told_with(user, "add_phone_number", "123", "456-7890")
        assert user.phone_numbers() == [["123", "456-7890"]]

    def test_initial_state_not_shared_between_instances(self, user_class):
        first, second = user_class(1), user_class(2)
        first.add_phone_number("1", "2")
        assert second.phone_numbers() == []

    def test_instances_have_independent_ledgers_and_overrides(self, user_class):
        first, second = user_class(1), user_class(2)
        first.will_name("Bill")
        first.name()
        assert second.name() == "Josh"
        assert times_told(first, "name") == 1
        assert times_told(second, "name") == 1

    def test_invocations_in_order(self, user_class):
        user = user_class(5)
        user.name()
        user.id()
        assert [i.name for i in invocations(user)] == ["__init__", "name", "id"]


class TestDispatch:
    def test_instance_access_to_singleton_operation_goes_to_class(self, user_class):
        user = user_class(1)
        user_class.will_find("found")
        assert user.find(9) == "found"
        assert told_with(user_class, "find", 9)

    def test_class_access_to_instance_operation_is_unbound(self, user_class):
        user = user_class(7)
        assert user_class.id(user) == 7
        assert times_told(user, "id") == 1

    def test_undeclared_operation(self, user_class):
        user = user_class(1)
        with pytest.raises(UndeclaredOperationError):
            user.will_have("email", "x")
        with pytest.raises(UndeclaredOperationError):
            user_class.will_name("Bill")

    def test_query_undeclared_name(self, user_class):
        with pytest.raises(UndeclaredOperationError):
            times_told(user_class, "email")

    def test_attribute_write_stores_state(self, user_class):
        user = user_class(1)
        user.address = "1 Main St."
        assert user.address() == "1 Main St."
        assert state_of(user)["address"] == "1 Main St."

    def test_attribute_write_replaces_default(self, user_class):
        user = user_class(1)
        user.name = "Bill"
        assert user.name() == "Bill"
        assert user_class(2).name() == "Josh"

    def test_undeclared_initializer_accepts_arguments(self):
        class Plain(Double):
            ping = sing(default="pong")

        plain = Plain(1, key="v")
        assert initialized_with(plain).kwargs == {"key": "v"}
        assert plain.ping() == "pong"

    def test_plain_init_rejected(self):
        with pytest.raises(DeclarationError):
            class Broken(Double):
                def __init__(self):
                    pass

    def test_hook_declared_in_decorator_form(self):
        notified = []

        class Mailer(Double):
            @sing(hook=lambda self, to: notified.append(to))
            def deliver(self, to):
                return f"sent to {to}"

        assert Mailer().deliver("bob") == "sent to bob"
        assert notified == ["bob"]

    def test_same_name_on_both_surfaces(self):
        class Repo(Double):
            count = sing.singleton(default=10)

        declare(Repo, "count", Surface.INSTANCE, default=1)
        assert Repo.count() == 10
        assert Repo().count() == 1

    def test_singleton_initial_state(self):
        class Cache(Double):
            entries = sing.singleton(initial={})

        Cache.entries()["k"] = "v"
        assert Cache.reprise().entries() == {}


class TestReprise:
    def test_reprise_is_isolated_from_prototype(self, user_prototype):
        before = times_told(user_prototype, "find")
        first = user_prototype.reprise()
        first.will_find("override")
        first.find(1)
        assert times_told(first, "find") == 1
        assert times_told(user_prototype, "find") == before
        assert user_prototype.find(2) != "override"

    def test_prototype_overrides_do_not_reach_new_reprise(self):
        class Catalog(Double):
            @sing.singleton
            def lookup(cls, sku):
                return f"item {sku}"

        Catalog.will_lookup("prototype")
        Catalog.lookup(1)
        copy = Catalog.reprise()
        assert copy.lookup(2) == "item 2"
        assert times_told(copy, "lookup") == 1
        assert times_told(Catalog, "lookup") == 1

    def test_two_reprises_are_independent(self, user_prototype):
        first, second = user_prototype.reprise(), user_prototype.reprise()
        first.will_find("first")
        first.find(1)
        assert times_told(second, "find") == 0
        assert isinstance(second.find(1), user_prototype)

    def test_declarations_on_reprise_stay_local(self, user_prototype):
        copy = user_prototype.reprise()
        declare(copy, "email", default="josh@example.com")
        assert copy(1).email() == "josh@example.com"
        with pytest.raises(AttributeError):
            user_prototype(1).email()

    def test_later_prototype_declarations_do_not_reach_reprise(self):
        class Account(Double):
            balance = sing(default=0)

        copy = Account.reprise()
        declare(Account, "owner", default="alice")
        assert Account().owner() == "alice"
        with pytest.raises(UndeclaredOperationError):
            copy().owner()

    def test_reprise_keeps_name(self, user_prototype):
        assert user_prototype.reprise().__qualname__ == user_prototype.__qualname__

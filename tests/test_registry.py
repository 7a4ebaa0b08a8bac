"""Unit tests for StubRegistry declarations and signatures."""

import pytest
from mockingbird.errors import DeclarationError, UndeclaredOperationError
from mockingbird.registry import OperationSignature, StubRegistry, Surface


@pytest.fixture
def registry():
    return StubRegistry("User")


class TestDeclare:
    def test_lookup_returns_declaration(self, registry):
        registry.declare(Surface.INSTANCE, "name", default="Josh")
        declaration = registry.lookup(Surface.INSTANCE, "name")
        assert declaration.default == "Josh"
        assert declaration.has_default
        assert not declaration.has_initial_state

    def test_lookup_undeclared_raises(self, registry):
        with pytest.raises(UndeclaredOperationError, match="address"):
            registry.lookup(Surface.INSTANCE, "address")

    def test_surfaces_are_separate(self, registry):
        registry.declare(Surface.SINGLETON, "find", default=None)
        assert registry.is_declared(Surface.SINGLETON, "find")
        assert not registry.is_declared(Surface.INSTANCE, "find")
        assert registry.names(Surface.INSTANCE) == set()

    def test_redeclare_replaces_entirely(self, registry):
        registry.declare(Surface.INSTANCE, "name", default="Josh", hook=lambda self: None)
        registry.declare(Surface.INSTANCE, "name", initial_state="Bill")
        declaration = registry.lookup(Surface.INSTANCE, "name")
        assert not declaration.has_default
        assert declaration.hook is None
        assert declaration.initial_state == "Bill"

    def test_no_default_still_declared(self, registry):
        registry.declare(Surface.INSTANCE, "address")
        assert registry.names(Surface.INSTANCE) == {"address"}

    @pytest.mark.parametrize("name", ["will_have", "will_find", "reprise", "_secret", "__len__", "not valid"])
    def test_reserved_and_invalid_names(self, registry, name):
        with pytest.raises(DeclarationError):
            registry.declare(Surface.INSTANCE, name)

    def test_body_and_default_conflict(self, registry):
        with pytest.raises(DeclarationError):
            registry.declare(Surface.INSTANCE, "name", default="x", body=lambda self: "y")

    def test_initializer_only_on_instance_surface(self, registry):
        with pytest.raises(DeclarationError):
            registry.declare(Surface.SINGLETON, "__init__")


class TestSignatures:
    def test_signature_from_body_skips_receiver(self, registry):
        declaration = registry.declare(Surface.SINGLETON, "find", body=lambda cls, id: None)
        assert declaration.signature == OperationSignature(required=1, positional_names=("id",))

    def test_signature_falls_back_to_hook(self, registry):
        declaration = registry.declare(
            Surface.INSTANCE, "add_phone_number", default=None,
            hook=lambda self, area_code, number: None,
        )
        assert declaration.signature.required == 2

    def test_accessor_has_empty_signature(self, registry):
        assert registry.declare(Surface.INSTANCE, "id").signature == OperationSignature()

    def test_from_callable_shapes(self):
        def op(self, a, b=1, *rest, c, d=2, **extra):
            pass

        signature = OperationSignature.from_callable(op)
        assert signature.required == 1
        assert signature.optional == 1
        assert signature.variadic is True
        assert signature.keyword_only == ("c", "d")
        assert signature.variadic_keywords is True
        assert signature.describe() == "(a, b=..., *args, c, d, **kwargs)"

    def test_matches_ignores_names_unless_strict(self):
        ours = OperationSignature(required=1, positional_names=("id",))
        theirs = OperationSignature(required=1, positional_names=("user_id",))
        assert ours.matches(theirs)
        assert not ours.matches(theirs, strict=True)

    def test_arity_mismatch(self):
        assert not OperationSignature(required=1).matches(OperationSignature(required=2))
        assert not OperationSignature(required=1).matches(OperationSignature(required=1, variadic=True))


class TestFork:
    def test_fork_starts_with_same_declarations(self, registry):
        registry.declare(Surface.INSTANCE, "name", default="Josh")
        forked = registry.fork("Copy")
        assert forked.lookup(Surface.INSTANCE, "name") is registry.lookup(Surface.INSTANCE, "name")
        assert forked.owner == "Copy"

    def test_fork_isolated_both_ways(self, registry):
        registry.declare(Surface.INSTANCE, "name", default="Josh")
        forked = registry.fork()
        forked.declare(Surface.INSTANCE, "address")
        registry.declare(Surface.INSTANCE, "email")
        assert not registry.is_declared(Surface.INSTANCE, "address")
        assert not forked.is_declared(Surface.INSTANCE, "email")

    def test_redeclare_in_fork_shadows_only_fork(self, registry):
        registry.declare(Surface.INSTANCE, "name", default="Josh")
        forked = registry.fork()
        forked.declare(Surface.INSTANCE, "name", default="Bill")
        assert registry.lookup(Surface.INSTANCE, "name").default == "Josh"
        assert forked.lookup(Surface.INSTANCE, "name").default == "Bill"

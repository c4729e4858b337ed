"""Tests for tether.binding.registry — validated binding table."""

import pytest

from tether.binding.registry import Binding, BindingRegistry
from tether.errors import BindingNotFoundError, ConfigurationError, InvalidBindingError


def _load_user(raw: str, request: object) -> dict:
    return {"id": int(raw)}


def _load_post(raw: str, request: object) -> dict:
    return {"id": int(raw)}


class TestRegister:
    def test_register_then_lookup_returns_same_resolver(self) -> None:
        registry = BindingRegistry()
        registry.register("user", _load_user)

        binding = registry.lookup("user")
        assert binding.name == "user"
        assert binding.resolver is _load_user

    def test_register_returns_binding(self) -> None:
        registry = BindingRegistry()
        binding = registry.register("user", _load_user)
        assert isinstance(binding, Binding)
        assert registry.lookup("user") is binding

    def test_binding_is_frozen(self) -> None:
        binding = BindingRegistry().register("user", _load_user)
        with pytest.raises(AttributeError):
            binding.name = "other"  # type: ignore[misc]

    @pytest.mark.parametrize("name", ["", None, 42])
    def test_rejects_bad_name(self, name: object) -> None:
        registry = BindingRegistry()
        with pytest.raises(InvalidBindingError, match="non-empty string"):
            registry.register(name, _load_user)  # type: ignore[arg-type]
        assert len(registry) == 0

    def test_rejects_missing_resolver(self) -> None:
        with pytest.raises(InvalidBindingError, match="no resolver"):
            BindingRegistry().register("user", None)  # type: ignore[arg-type]

    def test_rejects_non_callable_resolver(self) -> None:
        with pytest.raises(InvalidBindingError, match="not callable"):
            BindingRegistry().register("user", "load_user")  # type: ignore[arg-type]

    def test_duplicate_fails_and_keeps_first(self) -> None:
        registry = BindingRegistry()
        registry.register("user", _load_user)

        with pytest.raises(InvalidBindingError, match="already registered"):
            registry.register("user", _load_post)

        assert registry.lookup("user").resolver is _load_user
        assert len(registry) == 1

    def test_invalid_binding_is_configuration_error(self) -> None:
        assert issubclass(InvalidBindingError, ConfigurationError)

    def test_decorator_form(self) -> None:
        registry = BindingRegistry()

        @registry.binding("user")
        def load(raw: str) -> str:
            return raw

        assert registry.lookup("user").resolver is load

    def test_offload_flag_recorded(self) -> None:
        binding = BindingRegistry().register("user", _load_user, offload=True)
        assert binding.offload is True


class TestArity:
    def test_one_argument(self) -> None:
        binding = BindingRegistry().register("user", lambda raw: raw)
        assert binding.arity == 1

    def test_two_arguments(self) -> None:
        binding = BindingRegistry().register("user", _load_user)
        assert binding.arity == 2

    def test_three_arguments(self) -> None:
        binding = BindingRegistry().register("post", lambda raw, request, context: raw)
        assert binding.arity == 3

    def test_varargs_gets_everything(self) -> None:
        binding = BindingRegistry().register("post", lambda *args: args)
        assert binding.arity == 3

    def test_optional_extra_arguments_are_capped(self) -> None:
        def resolver(raw, request=None, context=None, extra=None):
            return raw

        assert BindingRegistry().register("x", resolver).arity == 3

    def test_bound_method(self) -> None:
        class Users:
            def load(self, raw: str) -> str:
                return raw

        assert BindingRegistry().register("user", Users().load).arity == 1

    def test_callable_object(self) -> None:
        class Loader:
            def __call__(self, raw: str, request: object) -> str:
                return raw

        assert BindingRegistry().register("user", Loader()).arity == 2

    def test_rejects_no_positional_arguments(self) -> None:
        with pytest.raises(InvalidBindingError, match="raw path value"):
            BindingRegistry().register("user", lambda: None)

    def test_rejects_too_many_required_arguments(self) -> None:
        with pytest.raises(InvalidBindingError, match="requires 4 arguments"):
            BindingRegistry().register("user", lambda a, b, c, d: None)

    def test_rejects_required_keyword_only(self) -> None:
        def resolver(raw, *, session):
            return raw

        with pytest.raises(InvalidBindingError, match="keyword-only"):
            BindingRegistry().register("user", resolver)

    def test_rejects_uninspectable_signature(self) -> None:
        class Opaque:
            __signature__ = "opaque"

            def __call__(self, raw: str) -> str:
                return raw

        with pytest.raises(InvalidBindingError, match="arity="):
            BindingRegistry().register("user", Opaque())

    def test_explicit_arity_for_builtin(self) -> None:
        binding = BindingRegistry().register("id", int, arity=1)
        assert binding.arity == 1
        assert binding.resolver is int

    def test_explicit_arity_overrides_signature(self) -> None:
        binding = BindingRegistry().register("user", lambda *args: args, arity=1)
        assert binding.arity == 1

    @pytest.mark.parametrize("arity", [0, 4])
    def test_rejects_out_of_range_arity(self, arity: int) -> None:
        registry = BindingRegistry()
        with pytest.raises(InvalidBindingError, match="must be 1, 2 or 3"):
            registry.register("id", int, arity=arity)
        assert "id" not in registry


class TestLookup:
    def test_missing_name_raises(self) -> None:
        with pytest.raises(BindingNotFoundError) as exc_info:
            BindingRegistry().lookup("ghost")
        assert exc_info.value.name == "ghost"
        assert "ghost" in str(exc_info.value)


class TestFreeze:
    def test_register_after_freeze_fails(self) -> None:
        registry = BindingRegistry()
        registry.freeze()
        assert registry.frozen
        with pytest.raises(InvalidBindingError, match="frozen"):
            registry.register("user", _load_user)

    def test_lookup_after_freeze(self) -> None:
        registry = BindingRegistry()
        registry.register("user", _load_user)
        registry.freeze()
        assert registry.lookup("user").resolver is _load_user


class TestEnumeration:
    def test_registration_order_preserved(self) -> None:
        registry = BindingRegistry()
        registry.register("post", _load_post)
        registry.register("user", _load_user)
        registry.register("comment", _load_post)

        assert registry.names == ("post", "user", "comment")
        assert [b.name for b in registry] == ["post", "user", "comment"]

    def test_contains(self) -> None:
        registry = BindingRegistry()
        registry.register("user", _load_user)
        assert "user" in registry
        assert "post" not in registry

    def test_repr(self) -> None:
        registry = BindingRegistry()
        registry.register("user", _load_user)
        assert "user" in repr(registry)
        assert "open" in repr(registry)

"""Tests for tether.routing.params — path converters."""

import re

import pytest

from tether.routing.params import CONVERTERS, converter_pattern


class TestConverters:
    def test_all_types_registered(self) -> None:
        assert set(CONVERTERS) == {"str", "int", "float", "slug", "path"}

    @pytest.mark.parametrize(
        ("param_type", "value", "matches"),
        [
            ("str", "alice", True),
            ("str", "a/b", False),
            ("int", "42", True),
            ("int", "4x", False),
            ("float", "3.14", True),
            ("slug", "hello-world_2", True),
            ("slug", "hello world", False),
            ("path", "docs/api/v2", True),
        ],
    )
    def test_pattern(self, param_type: str, value: str, matches: bool) -> None:
        assert bool(re.fullmatch(converter_pattern(param_type), value)) is matches

    def test_unknown_type_raises(self) -> None:
        with pytest.raises(KeyError):
            converter_pattern("uuid")

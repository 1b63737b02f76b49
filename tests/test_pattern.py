"""Tests for crooner.routing.pattern — path compilation and parameter building."""

import re

import pytest

from crooner.errors import ConfigurationError, InvalidPathSpec
from crooner.routing.pattern import CAPTURES, SPLAT, build_params, compile_path


class TestCompileString:
    def test_literal_path(self) -> None:
        pattern = compile_path("/hello")
        assert pattern.names == ()
        assert pattern.captures("/hello") == ()
        assert pattern.captures("/hello/") is None
        assert pattern.captures("/hello/world") is None

    def test_named_parameter(self) -> None:
        pattern = compile_path("/hello/:name")
        assert pattern.names == ("name",)
        assert pattern.captures("/hello/world") == ("world",)

    def test_named_parameter_stops_at_separators(self) -> None:
        pattern = compile_path("/hello/:name")
        assert pattern.captures("/hello/a/b") is None
        assert pattern.captures("/hello/a.b") is None
        assert pattern.captures("/hello/") is None

    def test_parameter_followed_by_literal_extension(self) -> None:
        pattern = compile_path("/:file.:ext")
        assert pattern.names == ("file", "ext")
        assert pattern.captures("/pony.jpg") == ("pony", "jpg")

    def test_splat(self) -> None:
        pattern = compile_path("/files/*")
        assert pattern.names == (SPLAT,)
        assert pattern.captures("/files/a/b/c.txt") == ("a/b/c.txt",)
        assert pattern.captures("/files/") == ("",)

    def test_multiple_splats(self) -> None:
        pattern = compile_path("/say/*/to/*")
        assert pattern.names == (SPLAT, SPLAT)
        assert pattern.captures("/say/hello/to/world") == ("hello", "world")

    def test_mixed_named_and_splat(self) -> None:
        pattern = compile_path("/:lang/*")
        assert pattern.names == ("lang", SPLAT)
        assert pattern.captures("/en/docs/intro") == ("en", "docs/intro")

    def test_regex_metacharacters_are_literal(self) -> None:
        pattern = compile_path("/a+b(c)")
        assert pattern.captures("/a+b(c)") == ()
        assert pattern.captures("/aab(c)") is None

    def test_declared_path_is_percent_encoded(self) -> None:
        pattern = compile_path("/foo bar")
        assert pattern.captures("/foo%20bar") == ()
        assert pattern.captures("/foo bar") is None

    def test_str_is_source(self) -> None:
        assert str(compile_path("/hello/:name")) == "/hello/:name"


class TestCompileMatchers:
    def test_compiled_regex_is_used_as_is(self) -> None:
        regex = re.compile(r"^/foo/(\d+)$")
        pattern = compile_path(regex)
        assert pattern.matcher is regex
        assert pattern.names == ()
        assert pattern.captures("/foo/42") == ("42",)
        assert pattern.captures("/foo/bar") is None

    def test_regex_without_anchors_searches(self) -> None:
        pattern = compile_path(re.compile(r"/b(\w)"))
        assert pattern.captures("/a/bc") == ("c",)

    def test_custom_matcher_object(self) -> None:
        class Prefix:
            def match(self, path: str) -> re.Match[str] | None:
                return re.match(r"/api/(\w+)", path)

        pattern = compile_path(Prefix())
        assert pattern.captures("/api/users") == ("users",)
        assert pattern.captures("/web/users") is None

    def test_matcher_returning_plain_truthy_value(self) -> None:
        class Always:
            def match(self, path: str) -> bool:
                return True

        assert compile_path(Always()).captures("/anything") == ()

    @pytest.mark.parametrize("spec", [42, None, ["/a"], object()])
    def test_invalid_spec_raises(self, spec: object) -> None:
        with pytest.raises(InvalidPathSpec):
            compile_path(spec)

    def test_invalid_spec_is_configuration_and_type_error(self) -> None:
        with pytest.raises(ConfigurationError):
            compile_path(3.5)
        with pytest.raises(TypeError):
            compile_path(3.5)


class TestBuildParams:
    def test_named(self) -> None:
        assert build_params(("name",), ("world",)) == {"name": "world"}

    def test_values_are_unescaped(self) -> None:
        params = build_params(("name", "other"), ("foo%20bar", "a+b"))
        assert params == {"name": "foo bar", "other": "a b"}

    def test_splats_accumulate_in_order(self) -> None:
        params = build_params((SPLAT, "id", SPLAT), ("a", "7", "b"))
        assert params == {SPLAT: ["a", "b"], "id": "7"}

    def test_single_splat_is_a_list(self) -> None:
        assert build_params((SPLAT,), ("x/y",)) == {SPLAT: ["x/y"]}

    def test_unnamed_captures(self) -> None:
        assert build_params((), ("1", "2")) == {CAPTURES: ["1", "2"]}

    def test_no_names_no_captures(self) -> None:
        assert build_params((), ()) == {}

    def test_unmatched_optional_group_stays_none(self) -> None:
        assert build_params((), ("a", None)) == {CAPTURES: ["a", None]}

    def test_only_unmatched_groups_give_no_captures(self) -> None:
        assert build_params((), (None, None)) == {}

"""Tests for waypost.routing.pattern — template compilation and matching."""

import pytest

from waypost.errors import ConfigurationError
from waypost.routing.pattern import (
    Placeholder,
    compile_path,
    normalize_path,
    normalize_template,
)


class TestStaticTemplates:
    def test_static_has_no_params(self) -> None:
        compiled = compile_path("/users")
        assert compiled.is_static
        assert compiled.param_names == ()
        assert compiled.match("/users") == {}

    def test_root(self) -> None:
        assert compile_path("/").match("/") == {}

    def test_case_insensitive_by_default(self) -> None:
        assert compile_path("/users").match("/USERS") == {}

    def test_case_sensitive(self) -> None:
        assert compile_path("/users", case_sensitive=True).match("/USERS") is None

    def test_anchored(self) -> None:
        compiled = compile_path("/users")
        assert compiled.match("/users/1") is None
        assert compiled.match("/api/users") is None

    def test_literal_dot_is_escaped(self) -> None:
        compiled = compile_path("/feed.xml")
        assert compiled.match("/feed.xml") == {}
        assert compiled.match("/feedxxml") is None


class TestPlaceholderTypes:
    def test_num(self) -> None:
        compiled = compile_path("/posts/{id:num}")
        assert compiled.match("/posts/42") == {"id": "42"}
        assert compiled.match("/posts/abc") is None

    def test_str(self) -> None:
        compiled = compile_path("/tags/{slug:str}")
        assert compiled.match("/tags/hello-world_1") == {"slug": "hello-world_1"}
        assert compiled.match("/tags/hello.world") is None

    def test_default_is_any(self) -> None:
        compiled = compile_path("/files/{name}")
        assert compiled.match("/files/report.pdf") == {"name": "report.pdf"}
        assert compiled.match("/files/a/b") is None

    def test_explicit_any(self) -> None:
        assert compile_path("/files/{name:any}").match("/files/x y") == {"name": "x y"}

    def test_all_spans_segments(self) -> None:
        compiled = compile_path("/docs/{path:all}")
        assert compiled.match("/docs/guide/intro/setup") == {"path": "guide/intro/setup"}

    def test_params_in_capture_order(self) -> None:
        compiled = compile_path("/users/{user:num}/posts/{post}")
        assert compiled.param_names == ("user", "post")
        params = compiled.match("/users/7/posts/hello")
        assert list(params.items()) == [("user", "7"), ("post", "hello")]

    def test_whitespace_inside_braces(self) -> None:
        assert compile_path("/p/{ id : num }").param_names == ("id",)


class TestOptionalPlaceholders:
    def test_separator_is_optional_too(self) -> None:
        compiled = compile_path("/foo/{bar}?")
        assert compiled.match("/foo") == {}
        assert compiled.match("/foo/value") == {"bar": "value"}

    def test_not_a_prefix_match(self) -> None:
        assert compile_path("/foo/{bar}?").match("/foox") is None

    def test_separator_recorded(self) -> None:
        compiled = compile_path("/foo/{bar}?")
        assert compiled.segments == (
            "/foo",
            Placeholder(name="bar", type="any", optional=True, separator="/"),
        )

    def test_root_optional_keeps_slash(self) -> None:
        compiled = compile_path("/{slug}?")
        assert compiled.match("/") == {}
        assert compiled.match("/about") == {"slug": "about"}

    def test_typed_optional(self) -> None:
        compiled = compile_path("/archive/{year:num}?")
        assert compiled.match("/archive/2024") == {"year": "2024"}
        assert compiled.match("/archive/latest") is None


class TestSegments:
    def test_required_placeholder(self) -> None:
        compiled = compile_path("/posts/{id:num}")
        assert compiled.segments == ("/posts/", Placeholder(name="id", type="num"))

    def test_trailing_literal(self) -> None:
        compiled = compile_path("/posts/{id}/edit")
        assert compiled.segments[-1] == "/edit"


class TestInvalidTemplates:
    def test_unknown_type(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown placeholder type"):
            compile_path("/posts/{id:int}")

    def test_invalid_name(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid placeholder name"):
            compile_path("/posts/{1st}")

    def test_empty_placeholder(self) -> None:
        with pytest.raises(ConfigurationError):
            compile_path("/posts/{}")

    def test_duplicate_name(self) -> None:
        with pytest.raises(ConfigurationError, match="Duplicate placeholder"):
            compile_path("/a/{id}/b/{id}")

    def test_rejects_flask_style_param(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            compile_path("/share/<slug>")
        assert "<param>" in str(exc_info.value)
        assert "/share/<slug>" in str(exc_info.value)


class TestNormalization:
    def test_path_strips_trailing_slash(self) -> None:
        assert normalize_path("/users/") == "/users"

    def test_path_root_stays(self) -> None:
        assert normalize_path("/") == "/"
        assert normalize_path("") == "/"

    def test_path_percent_decoded(self) -> None:
        assert normalize_path("/files/my%20file") == "/files/my file"

    def test_template_gets_leading_slash(self) -> None:
        assert normalize_template("posts/") == "/posts"

    def test_template_root(self) -> None:
        assert normalize_template("/") == "/"
        assert normalize_template("") == "/"

"""Tests for the path template compiler."""

import pytest

from smartreverse import compile_template
from smartreverse.exceptions import (
    InvalidParameterError,
    MissingParameterError,
    TemplateError,
    TemplateSyntaxError,
)


def test_named_parameter_is_substituted():
    build = compile_template("/users/:id")
    assert build({"id": 42}) == "/users/42"
    assert build.build({"id": "alice"}) == "/users/alice"


def test_template_without_parameters_is_returned_as_is():
    assert compile_template("api/v1/health")() == "api/v1/health"
    assert compile_template("")() == ""


def test_multiple_parameters_and_keys():
    template = compile_template("/users/:user/posts/:post?")
    assert [key.name for key in template.keys] == ["user", "post"]
    assert template({"user": 1, "post": 2}) == "/users/1/posts/2"


def test_optional_parameter_drops_its_prefix():
    template = compile_template("/users/:id?")
    assert template({}) == "/users"
    assert template({"id": None}) == "/users"
    assert template({"id": 3}) == "/users/3"


def test_partial_parameter_keeps_segment_shape():
    template = compile_template("/:name.:ext?")
    assert template({"name": "report"}) == "/report"
    assert template({"name": "report", "ext": "pdf"}) == "/report.pdf"


def test_repeated_parameters_join_items_with_delimiter():
    template = compile_template("/files/:path+")
    assert template({"path": ["a", "b", "c"]}) == "/files/a/b/c"
    assert template({"path": "single"}) == "/files/single"

    star = compile_template("/tags/:tag*")
    assert star({}) == "/tags"
    assert star({"tag": []}) == "/tags"
    assert star({"tag": ("x", "y")}) == "/tags/x/y"


def test_repeat_rules_are_enforced():
    with pytest.raises(InvalidParameterError):
        compile_template("/users/:id")({"id": [1, 2]})
    with pytest.raises(InvalidParameterError):
        compile_template("/files/:path+")({"path": []})


def test_custom_pattern_is_validated():
    template = compile_template("/users/:id(\\d+)")
    assert template({"id": 7}) == "/users/7"
    with pytest.raises(InvalidParameterError) as exc:
        template({"id": "abc"})
    assert '"id"' in str(exc.value)
    assert template.build({"id": "abc"}, validate=False) == "/users/abc"


def test_unnamed_and_catch_all_parameters_are_keyed_by_position():
    assert compile_template("/posts/(\\d+)")({0: 12}) == "/posts/12"
    assert compile_template("/static/*")({0: "css/site.css"}) == "/static/css/site.css"


def test_values_are_percent_encoded():
    assert compile_template("/search/:q")({"q": "a b/c"}) == "/search/a%20b%2Fc"
    assert compile_template("/wiki/:page")({"page": "caffè"}) == "/wiki/caff%C3%A8"


def test_escaped_characters_are_literal():
    assert compile_template("/time/12\\:00")() == "/time/12:00"


def test_missing_parameter_is_reported_by_name():
    template = compile_template("/users/:id")
    with pytest.raises(MissingParameterError) as exc:
        template({})
    assert exc.value.name == "id"
    assert str(exc.value) == 'Expected "id" to be defined'
    with pytest.raises(MissingParameterError):
        template({"id": None})


def test_parameters_must_be_a_mapping():
    with pytest.raises(TypeError):
        compile_template("/users/:id")(["id"])


@pytest.mark.parametrize(
    "template",
    [
        "/users/:",
        "/users/(",
        "/users/)",
        "/users/()",
        "/:id/:id",
        "/:id([)",
    ],
)
def test_malformed_templates_raise(template):
    with pytest.raises(TemplateSyntaxError):
        compile_template(template)


def test_non_string_template_is_rejected():
    with pytest.raises(TemplateSyntaxError):
        compile_template(None)  # type: ignore[arg-type]


def test_template_errors_share_a_base():
    assert issubclass(TemplateSyntaxError, TemplateError)
    assert issubclass(MissingParameterError, ValueError)


def test_match_extracts_decoded_parameters():
    template = compile_template("/users/:id")
    assert template.match("/users/42") == {"id": "42"}
    assert template.match("/users/42/") == {"id": "42"}
    assert template.match("/users/a%20b") == {"id": "a b"}
    assert template.match("/posts/42") is None
    assert template.match("/users/42/", strict=True) is None


def test_match_splits_repeated_parameters():
    template = compile_template("/files/:path+")
    assert template.match("/files/a/b") == {"path": ["a", "b"]}


def test_match_and_build_agree():
    template = compile_template("/users/:user/posts/:post?")
    params = template.match(template({"user": "u1", "post": "p9"}))
    assert params == {"user": "u1", "post": "p9"}
    assert template.match("/users/u1/posts") == {"user": "u1"}


def test_empty_string_counts_as_missing_even_without_validation():
    template = compile_template("/users/:id")
    with pytest.raises(MissingParameterError):
        template({"id": ""})
    with pytest.raises(MissingParameterError):
        template.build({"id": ""}, validate=False)
    assert compile_template("/users/:id?")({"id": ""}) == "/users"


def test_blank_repeated_item_is_missing():
    with pytest.raises(MissingParameterError) as exc:
        compile_template("/files/:path+").build({"path": ["a", ""]}, validate=False)
    assert exc.value.name == "path[1]"

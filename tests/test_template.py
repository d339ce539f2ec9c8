from __future__ import annotations

import pytest

from create_empirica_app.template import TemplateRenderer, TemplateRenderingError


@pytest.fixture()
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


def test_render_string_substitutes_placeholders(renderer: TemplateRenderer):
    template = "Project {{ name }} is called {{appName}}"
    rendered = renderer.render_string(template, {"name": "demo-app", "appName": "Demo App"})
    assert rendered == "Project demo-app is called Demo App"


def test_render_string_missing_policy_keep(renderer: TemplateRenderer):
    template = "Hello {{ missing }}"
    assert renderer.render_string(template, {}, missing="keep") == template


def test_render_string_missing_policy_empty(renderer: TemplateRenderer):
    template = "Hello {{ missing }}"
    assert renderer.render_string(template, {}, missing="empty") == "Hello "


def test_render_string_missing_policy_error(renderer: TemplateRenderer):
    with pytest.raises(TemplateRenderingError):
        renderer.render_string("{{ missing }}", {}, missing="error")


def test_dotted_lookup(renderer: TemplateRenderer):
    context = {"admin": {"username": "root"}}
    assert renderer.render_string("user={{admin.username}}", context, missing="error") == "user=root"


@pytest.mark.parametrize(
    "flag, expected",
    [(True, "[on]"), (False, "[off]")],
)
def test_if_else_block(renderer: TemplateRenderer, flag: bool, expected: str):
    template = "[{{#if enabled}}on{{else}}off{{/if}}]"
    assert renderer.render_string(template, {"enabled": flag}, missing="error") == expected


def test_unless_block(renderer: TemplateRenderer):
    template = "{{#unless admin}}guest {{/unless}}{{name}}"
    assert renderer.render_string(template, {"admin": False, "name": "ada"}) == "guest ada"
    assert renderer.render_string(template, {"admin": True, "name": "ada"}) == "ada"


def test_nested_blocks(renderer: TemplateRenderer):
    template = "{{#if a}}A{{#if b}}B{{else}}-{{/if}}{{/if}}{{#unless a}}none{{/unless}}"
    assert renderer.render_string(template, {"a": True, "b": False}) == "A-"
    assert renderer.render_string(template, {"a": True, "b": True}) == "AB"
    assert renderer.render_string(template, {"a": False, "b": True}) == "none"


def test_block_with_missing_key_errors_in_strict_mode(renderer: TemplateRenderer):
    with pytest.raises(TemplateRenderingError):
        renderer.render_string("{{#if nope}}x{{/if}}", {}, missing="error")
    assert renderer.render_string("{{#if nope}}x{{/if}}", {}, missing="keep") == ""


def test_unbalanced_block_raises(renderer: TemplateRenderer):
    with pytest.raises(TemplateRenderingError, match="unbalanced"):
        renderer.render_string("{{#if a}}open", {"a": True})


def test_escaped_braces_render_literally(renderer: TemplateRenderer):
    template = '<div style=\\{{ color: "red" }}>{{name}}</div>'
    rendered = renderer.render_string(template, {"name": "demo"}, missing="error")
    assert rendered == '<div style={{ color: "red" }}>demo</div>'
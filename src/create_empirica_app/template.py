"""Lightweight string templating utilities."""

from __future__ import annotations

import re
from typing import Any, Mapping

__all__ = [
    "TemplateRenderer",
    "TemplateRenderingError",
]


_PLACEHOLDER_PATTERN = re.compile(r"{{\s*(?P<key>[^{}]+?)\s*}}")
# Matches only innermost blocks: the body may not open another block.
_BLOCK_PATTERN = re.compile(
    r"{{\s*#(?P<kind>if|unless)\s+(?P<key>[^{}]+?)\s*}}"
    r"(?P<body>(?:(?!{{\s*#(?:if|unless)\b).)*?)"
    r"{{\s*/(?P=kind)\s*}}",
    re.DOTALL,
)
_ELSE_PATTERN = re.compile(r"{{\s*else\s*}}")
_STRAY_BLOCK_TAG = re.compile(r"{{\s*(?:[#/]\s*\w+|else\s*}})")
_ESCAPED_OPEN = "\\{{"
_OPEN_SENTINEL = "\x00open-brace\x00"

_MISSING_POLICIES = {"keep", "empty", "error"}


class TemplateRenderingError(RuntimeError):
    """Raised when the renderer cannot evaluate a placeholder."""


def _resolve_value(context: Mapping[str, Any], dotted_path: str) -> Any:
    value: Any = context
    for segment in dotted_path.split("."):
        if isinstance(value, Mapping):
            if segment not in value:
                raise KeyError(segment)
            value = value[segment]
            continue
        if hasattr(value, segment):
            value = getattr(value, segment)
            if callable(value):
                value = value()
            continue
        raise KeyError(segment)
    return value


class TemplateRenderer:
    """Render templates with ``{{ placeholder }}`` expressions and dotted lookup.

    Besides plain placeholders the renderer understands conditional blocks::

        {{#if key}} shown when key is truthy {{else}} otherwise {{/if}}
        {{#unless key}} shown when key is falsy {{/unless}}

    A literal ``{{`` is written as ``\\{{``.
    """

    def _render_blocks(self, template: str, context: Mapping[str, Any], missing: str) -> str:
        def evaluate(match: re.Match[str]) -> str:
            key = match.group("key").strip()
            try:
                value = _resolve_value(context, key)
            except KeyError:
                if missing == "error":
                    raise TemplateRenderingError(f"missing value for '{key}'")
                value = None

            truthy_branch, falsy_branch = _split_else(match.group("body"))
            condition = bool(value)
            if match.group("kind") == "unless":
                condition = not condition
            return truthy_branch if condition else falsy_branch

        previous = None
        while previous != template:
            previous = template
            template = _BLOCK_PATTERN.sub(evaluate, template)

        stray = _STRAY_BLOCK_TAG.search(template)
        if stray is not None:
            raise TemplateRenderingError(f"unbalanced block tag '{stray.group(0)}'")
        return template

    def render_string(
        self,
        template: str,
        context: Mapping[str, Any],
        *,
        missing: str = "keep",
    ) -> str:
        """Render ``template`` using ``context``.

        Parameters
        ----------
        template:
            The template string to evaluate.
        context:
            Mapping providing values for placeholders.
        missing:
            Controls what happens when a placeholder cannot be resolved. The
            supported policies are ``"keep"`` (return the placeholder unchanged),
            ``"empty"`` (replace with an empty string) and ``"error"`` (raise
            :class:`TemplateRenderingError`).
        """

        if missing not in _MISSING_POLICIES:
            raise ValueError("missing must be 'keep', 'empty', or 'error'")

        def substitute(match: re.Match[str]) -> str:
            key = match.group("key").strip()
            try:
                value = _resolve_value(context, key)
            except KeyError:
                if missing == "keep":
                    return match.group(0)
                if missing == "empty":
                    return ""
                raise TemplateRenderingError(f"missing value for '{key}'")
            return str(value)

        text = template.replace(_ESCAPED_OPEN, _OPEN_SENTINEL)
        text = self._render_blocks(text, context, missing)
        text = _PLACEHOLDER_PATTERN.sub(substitute, text)
        return text.replace(_OPEN_SENTINEL, "{{")


def _split_else(body: str) -> tuple[str, str]:
    parts = _ELSE_PATTERN.split(body, maxsplit=1)
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], parts[1]

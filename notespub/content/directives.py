"""Parsing and rewriting of DocC ``@Metadata`` directive blocks."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence, Tuple

from ..models import CallToAction, ContentPage, PageMetadata

DEFAULT_INDENT = "   "

_TITLE_RE = re.compile(r"^#\s+(?P<title>.+?)\s*$")
_DIRECTIVE_RE = re.compile(r"^\s*@(?P<name>\w+)\s*(?:\((?P<args>.*)\))?\s*(?P<brace>\{)?\s*$")
_ARGUMENT_RE = re.compile(r'(?P<key>\w+)\s*:\s*(?P<value>"(?:[^"\\]|\\.)*"|[^,]+)')


def parse_page(path: str, text: str) -> ContentPage:
    """Return a ``ContentPage`` for the raw markdown of a note."""
    lines = text.splitlines()
    title = ""
    title_index = None
    for index, line in enumerate(lines):
        match = _TITLE_RE.match(line)
        if match:
            title = _clean_title(match.group("title"))
            title_index = index
            break

    metadata = None
    span = find_block(lines, "Metadata")
    if span is not None:
        metadata = parse_metadata(lines[span[0] + 1 : span[1]])

    skipped = set()
    if title_index is not None:
        skipped.add(title_index)
    if span is not None:
        skipped.update(range(span[0], span[1] + 1))
    body = "\n".join(line for index, line in enumerate(lines) if index not in skipped).strip()
    return ContentPage(path=path, title=title, metadata=metadata, body=body)


def parse_metadata(lines: Sequence[str]) -> PageMetadata:
    """Parse the inner lines of a ``@Metadata`` block."""
    metadata = PageMetadata()
    index = 0
    while index < len(lines):
        line = lines[index]
        stripped = line.strip()
        if not stripped:
            index += 1
            continue
        match = _DIRECTIVE_RE.match(line)
        if match is None:
            metadata.extra.append(stripped)
            index += 1
            continue

        name = match.group("name")
        args = match.group("args") or ""
        if match.group("brace"):
            end = _matching_close(lines, index)
            inner = lines[index + 1 : end]
            if name == "Contributors":
                metadata.contributors = _parse_contributors(inner)
            else:
                metadata.extra.extend(item.strip() for item in lines[index : end + 1])
            index = end + 1
            continue

        if name == "TitleHeading":
            metadata.title_heading = _unquote(args)
        elif name == "PageKind":
            metadata.page_kind = _unquote(args)
        elif name == "CallToAction":
            arguments = parse_arguments(args)
            url = arguments.get("url")
            if url:
                metadata.call_to_action = CallToAction(
                    url=url,
                    purpose=arguments.get("purpose"),
                    label=arguments.get("label"),
                )
        else:
            metadata.extra.append(stripped)
        index += 1
    return metadata


def parse_arguments(args: str) -> Dict[str, str]:
    """Parse ``key: value`` directive arguments, unquoting string values."""
    return {match.group("key"): _unquote(match.group("value")) for match in _ARGUMENT_RE.finditer(args)}


def find_block(
    lines: Sequence[str], name: str, start: int = 0, stop: Optional[int] = None
) -> Optional[Tuple[int, int]]:
    """Return the (open, close) line indexes of the first ``@name { ... }`` block."""
    stop = len(lines) if stop is None else stop
    for index in range(start, stop):
        match = _DIRECTIVE_RE.match(lines[index])
        if match and match.group("name") == name and match.group("brace"):
            return index, _matching_close(lines, index)
    return None


def set_contributors(text: str, logins: Sequence[str], *, indent: str = DEFAULT_INDENT) -> str:
    """Return ``text`` with its ``@Contributors`` block listing ``logins``."""
    lines = text.splitlines()
    trailing_newline = text.endswith("\n")

    metadata_span = find_block(lines, "Metadata")
    if metadata_span is None:
        block = render_metadata(PageMetadata(contributors=list(logins)), indent=indent)
        insert_at = _abstract_end_index(lines)
        head = lines[:insert_at]
        tail = list(lines[insert_at:])
        while tail and not tail[0].strip():
            tail.pop(0)
        new_lines = head + ([""] if head else []) + block.splitlines()
        if tail:
            new_lines += [""] + tail
        return _join(new_lines, trailing_newline)

    meta_open, meta_close = metadata_span
    inner_indent = _inner_indent(lines[meta_open + 1 : meta_close], lines[meta_open], indent)
    rendered = _render_contributors(logins, inner_indent, indent)

    contributors_span = find_block(lines, "Contributors", meta_open + 1, meta_close)
    if contributors_span is None:
        new_lines = lines[:meta_close] + rendered + lines[meta_close:]
    else:
        new_lines = lines[: contributors_span[0]] + rendered + lines[contributors_span[1] + 1 :]
    return _join(new_lines, trailing_newline)


def render_metadata(metadata: PageMetadata, *, indent: str = DEFAULT_INDENT) -> str:
    """Render a complete ``@Metadata`` block."""
    lines = ["@Metadata {"]
    if metadata.title_heading:
        lines.append(f'{indent}@TitleHeading("{metadata.title_heading}")')
    if metadata.page_kind:
        lines.append(f"{indent}@PageKind({metadata.page_kind})")
    if metadata.call_to_action:
        cta = metadata.call_to_action
        parts = [f'url: "{cta.url}"']
        if cta.purpose:
            parts.append(f"purpose: {cta.purpose}")
        if cta.label:
            parts.append(f'label: "{cta.label}"')
        lines.append(f"{indent}@CallToAction({', '.join(parts)})")
    lines.extend(f"{indent}{item}" for item in metadata.extra)
    if metadata.contributors:
        lines.extend(_render_contributors(metadata.contributors, indent, indent))
    lines.append("}")
    return "\n".join(lines)


def _render_contributors(logins: Sequence[str], outer: str, step: str) -> List[str]:
    lines = [f"{outer}@Contributors {{"]
    lines.extend(f"{outer}{step}@GitHubUser({login})" for login in logins)
    lines.append(f"{outer}}}")
    return lines


def _parse_contributors(lines: Sequence[str]) -> List[str]:
    logins: List[str] = []
    for line in lines:
        match = _DIRECTIVE_RE.match(line)
        if match and match.group("name") == "GitHubUser":
            login = _unquote(match.group("args") or "")
            if login and login not in logins:
                logins.append(login)
    return logins


def _matching_close(lines: Sequence[str], open_index: int) -> int:
    depth = 0
    for index in range(open_index, len(lines)):
        depth += _brace_delta(lines[index])
        if depth <= 0:
            return index
    raise ValueError(f"Unterminated directive block starting at line {open_index + 1}")


def _brace_delta(line: str) -> int:
    delta = 0
    in_string = False
    escaped = False
    for char in line:
        if escaped:
            escaped = False
            continue
        if char == "\\":
            escaped = True
        elif char == '"':
            in_string = not in_string
        elif not in_string and char == "{":
            delta += 1
        elif not in_string and char == "}":
            delta -= 1
    return delta


def _inner_indent(inner: Sequence[str], opener: str, fallback: str) -> str:
    for line in inner:
        if line.strip():
            return line[: len(line) - len(line.lstrip())]
    base = opener[: len(opener) - len(opener.lstrip())]
    return base + fallback


def _abstract_end_index(lines: Sequence[str]) -> int:
    """Index just past the title and its abstract paragraph."""
    index = 0
    while index < len(lines):
        if _TITLE_RE.match(lines[index]):
            index += 1
            break
        index += 1
    else:
        return 0
    while index < len(lines) and not lines[index].strip():
        index += 1
    while index < len(lines):
        stripped = lines[index].strip()
        if not stripped or stripped.startswith(("#", "@", "```")):
            break
        index += 1
    return index


def _clean_title(title: str) -> str:
    title = title.strip()
    if title.startswith("``") and title.endswith("``") and len(title) > 4:
        title = title[2:-2]
    return title.strip()


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1].replace('\\"', '"')
    return value


def _join(lines: Sequence[str], trailing_newline: bool) -> str:
    text = "\n".join(lines)
    return text + "\n" if trailing_newline else text


__all__ = [
    "find_block",
    "parse_arguments",
    "parse_metadata",
    "parse_page",
    "render_metadata",
    "set_contributors",
]

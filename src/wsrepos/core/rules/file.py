"""Build file loading, editing and printing.

Starlark build files (WORKSPACE, *.bzl) are syntactically a subset of
Python, so they are parsed with :mod:`ast`. Only the parts wsrepos edits
are modelled:

- top-level calls (``go_repository(name = ...)``) as :class:`Rule`
- top-level ``load(...)`` statements as :class:`Load`
- ``# wsrepos:<key> <value>`` comment lines as :class:`Directive`
- for macro files, the calls inside one named ``def``

Every rule and load remembers the source span it was parsed from. Printing
a file splices replacement text into those spans only, so anything that was
not edited comes back byte for byte.
"""
from __future__ import annotations

import ast
import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, Union

from wsrepos.core.exceptions import LoadError, SaveError
from wsrepos.core.utils.io import read_text, write_text

logger = logging.getLogger(__name__)

DIRECTIVE_PREFIX = "wsrepos:"
INDENT = "    "

_DIRECTIVE_RE = re.compile(r"^#\s*wsrepos:(?P<key>[A-Za-z_][\w]*)(?:\s+(?P<value>.*?))?\s*$")


@dataclass(frozen=True, slots=True)
class RawExpr:
    """An attribute value that is not a plain literal, kept as source text."""

    text: str


@dataclass(frozen=True, slots=True)
class Directive:
    """A ``# wsrepos:<key> <value>`` comment line."""

    key: str
    value: str

    def format(self) -> str:
        return f"# {DIRECTIVE_PREFIX}{self.key} {self.value}".rstrip()


@dataclass(frozen=True, slots=True)
class _Span:
    start: int
    end: int


def quote(value: str) -> str:
    """Return ``value`` as a double-quoted Starlark string literal."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def format_value(value: Any, indent: str = "") -> str:
    """Print an attribute value as Starlark source.

    Lists and dicts with more than one element are split over several lines,
    one element per line, indented one level deeper than ``indent``.
    """
    if isinstance(value, RawExpr):
        return value.text
    if isinstance(value, bool):
        return "True" if value else "False"
    if value is None:
        return "None"
    if isinstance(value, str):
        return quote(value)
    if isinstance(value, (int, float)):
        return repr(value)
    inner = indent + INDENT
    if isinstance(value, (list, tuple)):
        open_, close = ("[", "]") if isinstance(value, list) else ("(", ")")
        items = [format_value(v, inner) for v in value]
        if not items:
            return open_ + close
        if len(items) == 1 and "\n" not in items[0] and open_ == "[":
            return f"[{items[0]}]"
        body = "".join(f"{inner}{item},\n" for item in items)
        return f"{open_}\n{body}{indent}{close}"
    if isinstance(value, dict):
        if not value:
            return "{}"
        body = "".join(
            f"{inner}{format_value(k, inner)}: {format_value(v, inner)},\n" for k, v in value.items()
        )
        return f"{{\n{body}{indent}}}"
    return str(value)


def _indent_block(text: str, indent: str, *, first: bool = True) -> str:
    lines = text.split("\n")
    out = []
    for i, line in enumerate(lines):
        if (i == 0 and not first) or not line:
            out.append(line)
        else:
            out.append(indent + line)
    return "\n".join(out)


class Rule:
    """A call statement in a build file, such as a repository rule.

    Attribute values are Python values (str, bool, int, list, dict) when the
    source was a literal, or :class:`RawExpr` otherwise.
    """

    def __init__(
        self,
        kind: str,
        attrs: dict[str, Any] | None = None,
        *,
        args: Iterable[str] = (),
        span: _Span | None = None,
        indent: str = "",
    ) -> None:
        self._kind = kind
        self._attrs: dict[str, Any] = dict(attrs or {})
        self._args = list(args)
        self._span = span
        self._indent = indent
        self._changed = False
        self._deleted = False

    def __repr__(self) -> str:
        return f"Rule({self._kind!r}, name={self.name!r})"

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def name(self) -> str:
        return self.attr_string("name")

    @property
    def attrs(self) -> dict[str, Any]:
        """A copy of the rule's keyword attributes."""
        return dict(self._attrs)

    @property
    def changed(self) -> bool:
        return self._changed

    @property
    def deleted(self) -> bool:
        return self._deleted

    @property
    def inserted(self) -> bool:
        return self._span is None

    def attr(self, key: str, default: Any = None) -> Any:
        return self._attrs.get(key, default)

    def attr_string(self, key: str) -> str:
        """Return a string attribute, or "" when unset or not a string literal."""
        value = self._attrs.get(key)
        return value if isinstance(value, str) else ""

    def set_attr(self, key: str, value: Any) -> bool:
        """Set ``key`` to ``value``. Returns False when it already had that value."""
        if key in self._attrs and self._attrs[key] == value:
            return False
        self._attrs[key] = value
        self._changed = True
        return True

    def del_attr(self, key: str) -> bool:
        if key not in self._attrs:
            return False
        del self._attrs[key]
        self._changed = True
        return True

    def delete(self) -> None:
        self._deleted = True

    def _ordered_attrs(self) -> Iterator[tuple[str, Any]]:
        if "name" in self._attrs:
            yield "name", self._attrs["name"]
        for key, value in self._attrs.items():
            if key != "name":
                yield key, value

    def format(self) -> str:
        """Print the rule. Continuation lines are not indented."""
        if not self._args and not self._attrs:
            return f"{self._kind}()"
        lines = [f"{self._kind}("]
        for raw in self._args:
            lines.append(f"{INDENT}{raw},")
        for key, value in self._ordered_attrs():
            lines.append(f"{INDENT}{key} = {format_value(value, INDENT)},")
        lines.append(")")
        return "\n".join(lines)


class Load:
    """A ``load("<label>", "sym", alias = "sym")`` statement."""

    def __init__(
        self,
        name: str,
        symbols: Iterable[str] = (),
        *,
        aliases: dict[str, str] | None = None,
        span: _Span | None = None,
    ) -> None:
        self.name = name
        self._symbols = list(symbols)
        self._aliases = dict(aliases or {})
        self._span = span
        self._changed = False

    def __repr__(self) -> str:
        return f"Load({self.name!r}, {self._symbols!r})"

    @property
    def symbols(self) -> list[str]:
        """Local names bound by this load."""
        return [*self._symbols, *self._aliases]

    @property
    def changed(self) -> bool:
        return self._changed

    def has(self, symbol: str) -> bool:
        return symbol in self._symbols or symbol in self._aliases

    def add(self, symbol: str) -> None:
        if not self.has(symbol):
            self._symbols.append(symbol)
            self._changed = True

    def format(self) -> str:
        args = [quote(self.name), *(quote(s) for s in self._symbols)]
        args.extend(f"{alias} = {quote(symbol)}" for alias, symbol in self._aliases.items())
        return f"load({', '.join(args)})"


class _OffsetIndex:
    """Converts ast (line, utf-8 byte column) positions into str offsets."""

    def __init__(self, content: str) -> None:
        self.lines = io.StringIO(content, newline="").readlines()
        self.starts = [0]
        for line in self.lines:
            self.starts.append(self.starts[-1] + len(line))

    def offset(self, lineno: int, col: int) -> int:
        if lineno > len(self.lines):
            return self.starts[-1]
        line = self.lines[lineno - 1]
        prefix = line.encode("utf-8")[:col].decode("utf-8", errors="ignore")
        return self.starts[lineno - 1] + len(prefix)

    def span(self, node: ast.stmt) -> _Span:
        end_lineno = node.end_lineno or node.lineno
        end_col = node.end_col_offset if node.end_col_offset is not None else 0
        return _Span(self.offset(node.lineno, node.col_offset), self.offset(end_lineno, end_col))


_Pending = Union[Rule, Directive]


class RuleFile:
    """A parsed WORKSPACE or .bzl file.

    For macro files (``def_name`` set) :attr:`rules` holds the calls inside
    that ``def`` and new rules are inserted at the end of its body; the
    ``def`` is appended to the file if it does not exist yet.
    """

    def __init__(self, path: Path, content: str = "", *, def_name: str | None = None) -> None:
        self.path = Path(path)
        self.def_name = def_name
        self._load_content(content)

    def __repr__(self) -> str:
        suffix = f"%{self.def_name}" if self.def_name else ""
        return f"RuleFile({str(self.path)!r}{suffix})"

    # -- parsing ---------------------------------------------------------

    def _load_content(self, content: str) -> None:
        self._content = content
        self.rules: list[Rule] = []
        self.loads: list[Load] = []
        self.directives: list[Directive] = []
        self._pending: list[_Pending] = []
        self._new_loads: list[Load] = []
        self._def_found = False
        self._def_indent = INDENT
        self._def_body_count = 0
        self._def_body_end: int | None = None
        self._def_pass: _Span | None = None
        self._workspace_rule_end: int | None = None

        try:
            tree = ast.parse(content, filename=str(self.path))
        except SyntaxError as exc:
            raise LoadError(
                f"{self.path}:{exc.lineno}: {exc.msg}",
                path=str(self.path),
                line=exc.lineno,
            ) from exc

        index = _OffsetIndex(content)
        self.directives = self._parse_directives(index.lines)

        for stmt in tree.body:
            call = _as_call(stmt)
            if call is not None and _call_kind(call) == "load":
                load = self._parse_load(call, index.span(stmt))
                if load is not None:
                    self.loads.append(load)

        if self.def_name is None:
            for stmt in tree.body:
                self._collect_rule(stmt, index, indent="")
            return

        for stmt in tree.body:
            if isinstance(stmt, ast.FunctionDef) and stmt.name == self.def_name:
                self._def_found = True
                self._def_body_count = len(stmt.body)
                first = stmt.body[0]
                indent = index.lines[first.lineno - 1][: _col(index, first)]
                if indent and not indent.strip():
                    self._def_indent = indent
                if len(stmt.body) == 1 and isinstance(first, ast.Pass):
                    self._def_pass = index.span(first)
                # New rules go on the line after the last body statement.
                last_end = index.span(stmt.body[-1]).end
                newline = content.find("\n", last_end)
                self._def_body_end = len(content) if newline < 0 else newline + 1
                for body_stmt in stmt.body:
                    self._collect_rule(body_stmt, index, indent=self._def_indent)
                break

    def _parse_directives(self, lines: list[str]) -> list[Directive]:
        directives = []
        for line in lines:
            if not line.startswith("#"):
                continue
            m = _DIRECTIVE_RE.match(line.rstrip("\r\n"))
            if m:
                directives.append(Directive(m.group("key"), m.group("value") or ""))
        return directives

    def _parse_load(self, call: ast.Call, span: _Span) -> Load | None:
        if not call.args or not _is_str(call.args[0]):
            logger.warning("%s: ignoring load() without a string label", self.path)
            return None
        symbols = [a.value for a in call.args[1:] if _is_str(a)]
        aliases = {
            kw.arg: kw.value.value for kw in call.keywords if kw.arg is not None and _is_str(kw.value)
        }
        return Load(call.args[0].value, symbols, aliases=aliases, span=span)

    def _collect_rule(self, stmt: ast.stmt, index: _OffsetIndex, *, indent: str) -> None:
        call = _as_call(stmt)
        if call is None:
            return
        kind = _call_kind(call)
        if kind is None or kind == "load":
            return
        args = [_source(self._content, index, a) for a in call.args]
        attrs: dict[str, Any] = {}
        for kw in call.keywords:
            if kw.arg is None:
                args.append("**" + _source(self._content, index, kw.value))
            else:
                attrs[kw.arg] = _literal(self._content, index, kw.value)
        span = index.span(stmt)
        self.rules.append(Rule(kind, attrs, args=args, span=span, indent=indent))
        if kind == "workspace" and indent == "" and self._workspace_rule_end is None:
            self._workspace_rule_end = span.end

    # -- editing ---------------------------------------------------------

    def insert_rule(self, rule: Rule) -> None:
        """Append ``rule`` to the file (or to the end of the macro body)."""
        if not rule.inserted:
            raise ValueError(f"{rule!r} already belongs to a file")
        rule._indent = self._def_indent if self.def_name else ""
        self.rules.append(rule)
        self._pending.append(rule)

    def add_directive(self, key: str, value: str) -> None:
        """Append a ``# wsrepos:`` directive line at the end of the file."""
        if self.def_name is not None:
            raise ValueError("directives can only be added to top-level files")
        directive = Directive(key, value)
        self.directives.append(directive)
        self._pending.append(directive)

    def has_directive(self, key: str, value: str) -> bool:
        return any(d.key == key and d.value == value for d in self.directives)

    def has_loaded(self, symbol: str) -> bool:
        return any(load.has(symbol) for load in self.loads)

    def ensure_load(self, name: str, symbol: str) -> bool:
        """Make ``symbol`` available from ``name``. Returns True if the file changed."""
        if self.has_loaded(symbol):
            return False
        for load in self.loads:
            if load.name == name:
                load.add(symbol)
                return True
        load = Load(name, [symbol])
        self.loads.append(load)
        self._new_loads.append(load)
        return True

    def rules_of_kind(self, kind: str) -> list[Rule]:
        return [r for r in self.rules if r.kind == kind and not r.deleted]

    # -- printing --------------------------------------------------------

    @property
    def content(self) -> str:
        """The text the file was loaded with (or last saved as)."""
        return self._content

    @property
    def changed(self) -> bool:
        return self.format() != self._content

    def format(self) -> str:
        """Print the file with all pending edits applied."""
        content = self._content
        edits: list[tuple[int, int, int, str]] = []
        seq = 0

        def edit(start: int, end: int, text: str) -> None:
            nonlocal seq
            edits.append((start, end, seq, text))
            seq += 1

        for load in self.loads:
            if load._span is not None and load.changed:
                edit(load._span.start, load._span.end, load.format())

        if self._new_loads:
            block = "\n".join(load.format() for load in self._new_loads)
            if any(load._span is not None for load in self.loads):
                last = max(load._span.end for load in self.loads if load._span is not None)
                edit(last, last, "\n" + block)
            elif self._workspace_rule_end is not None:
                edit(self._workspace_rule_end, self._workspace_rule_end, "\n\n" + block)
            else:
                edit(0, 0, block + ("\n\n" if content.strip() else "\n"))

        pending_rules = [p for p in self._pending if isinstance(p, Rule)]
        body_emptied = (
            self.def_name is not None
            and self._def_found
            and not pending_rules
            and self._def_body_count > 0
            and sum(1 for r in self.rules if r.deleted and not r.inserted) == self._def_body_count
        )
        pass_written = False
        for rule in self.rules:
            if rule.inserted or rule._span is None:
                continue
            if rule.deleted:
                if body_emptied and not pass_written:
                    edit(rule._span.start, rule._span.end, "pass")
                    pass_written = True
                else:
                    start, end = _deletion_range(content, rule._span)
                    edit(start, end, "")
            elif rule.changed:
                edit(rule._span.start, rule._span.end, _indent_block(rule.format(), rule._indent, first=False))

        if self.def_name is None:
            live = [p for p in self._pending if not (isinstance(p, Rule) and p.deleted)]
            if live:
                preceded = bool(content) or bool(self._new_loads)
                edit(len(content), len(content), _append_prefix(content, preceded) + _render_block(live))
        else:
            self._format_def_inserts(content, pending_rules, edit)

        if not edits:
            return content
        out = []
        pos = 0
        for start, end, _, text in sorted(edits):
            out.append(content[pos:start])
            out.append(text)
            pos = max(pos, end)
        out.append(content[pos:])
        return "".join(out)

    def _format_def_inserts(self, content: str, rules: list[Rule], edit: Any) -> None:
        rules = [r for r in rules if not r.deleted]
        indent = self._def_indent
        rendered = [_indent_block(r.format(), indent) for r in rules]
        if not self._def_found:
            body = "\n".join(rendered) if rendered else f"{indent}pass"
            preceded = bool(content) or bool(self._new_loads)
            text = f"{_append_prefix(content, preceded)}def {self.def_name}():\n{body}\n"
            edit(len(content), len(content), text)
            return
        if not rendered:
            return
        if self._def_pass is not None:
            text = "\n".join(rendered)[len(indent):]
            edit(self._def_pass.start, self._def_pass.end, text)
            return
        anchor = self._def_body_end if self._def_body_end is not None else len(content)
        prefix = "" if content[anchor - 1:anchor] == "\n" else "\n"
        edit(anchor, anchor, prefix + "".join(r + "\n" for r in rendered))

    def save(self) -> None:
        """Write the file back if anything changed.

        Raises:
            SaveError: If the file cannot be written
        """
        content = self.format()
        if content == self._content and self.path.exists():
            return
        try:
            write_text(self.path, content)
        except OSError as exc:
            raise SaveError(f"writing {self.path}: {exc}", path=str(self.path)) from exc
        self.mark_saved(content)

    def mark_saved(self, content: str) -> None:
        """Adopt ``content``, already written to disk, as the file's state."""
        logger.info("wrote %s", self.path)
        self._load_content(content)


def _append_prefix(content: str, preceded: bool) -> str:
    if not content:
        return "\n" if preceded else ""
    if content.endswith("\n"):
        return "\n"
    return "\n\n"


def _render_block(items: list[_Pending]) -> str:
    chunks: list[str] = []
    after_directive = False
    for item in items:
        if chunks and not after_directive:
            chunks.append("\n")
        chunks.append(item.format() + "\n")
        after_directive = isinstance(item, Directive)
    return "".join(chunks)


def _deletion_range(content: str, span: _Span) -> tuple[int, int]:
    """Widen ``span`` to whole lines when the statement is alone on them."""
    line_start = content.rfind("\n", 0, span.start) + 1
    if content[line_start:span.start].strip():
        return span.start, span.end
    line_end = content.find("\n", span.end)
    line_end = len(content) if line_end < 0 else line_end + 1
    rest = content[span.end:line_end].strip()
    if rest and not rest.startswith("#"):
        return span.start, span.end
    # Take the blank line before the statement with it; at the top of the
    # file, the blank line after it.
    if content[:line_start].endswith("\n\n"):
        line_start -= 1
    elif line_start == 0:
        next_end = content.find("\n", line_end)
        if next_end >= 0 and not content[line_end:next_end].strip():
            line_end = next_end + 1
    return line_start, line_end


def _as_call(stmt: ast.stmt) -> ast.Call | None:
    if isinstance(stmt, ast.Expr) and isinstance(stmt.value, ast.Call):
        return stmt.value
    return None


def _call_kind(call: ast.Call) -> str | None:
    return call.func.id if isinstance(call.func, ast.Name) else None


def _is_str(node: ast.expr) -> bool:
    return isinstance(node, ast.Constant) and isinstance(node.value, str)


def _col(index: _OffsetIndex, node: ast.stmt) -> int:
    return index.offset(node.lineno, node.col_offset) - index.starts[node.lineno - 1]


def _source(content: str, index: _OffsetIndex, node: ast.expr) -> str:
    start = index.offset(node.lineno, node.col_offset)
    end = index.offset(node.end_lineno or node.lineno, node.end_col_offset or 0)
    return content[start:end]


def _literal(content: str, index: _OffsetIndex, node: ast.expr) -> Any:
    try:
        return ast.literal_eval(node)
    except (ValueError, TypeError, SyntaxError, RecursionError):
        return RawExpr(_source(content, index, node))


def _read(path: Path) -> str:
    try:
        return read_text(path)
    except FileNotFoundError as exc:
        raise LoadError(f"{path}: file not found", path=str(path)) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(f"{path}: {exc}", path=str(path)) from exc


def load_file(path: Path | str) -> RuleFile:
    """Parse a top-level build file (e.g. WORKSPACE)."""
    path = Path(path)
    return RuleFile(path, _read(path))


def load_workspace_file(path: Path | str) -> RuleFile:
    """Parse the root WORKSPACE file.

    Raises:
        LoadError: If the file is missing or is not valid Starlark
    """
    workspace = load_file(path)
    logger.debug("loaded %s: %d rules", workspace.path, len(workspace.rules))
    return workspace


def load_macro_file(path: Path | str, def_name: str) -> RuleFile:
    """Parse a .bzl file, exposing the rules declared inside ``def_name``."""
    path = Path(path)
    return RuleFile(path, _read(path), def_name=def_name)


def empty_macro_file(path: Path | str, def_name: str) -> RuleFile:
    """A not-yet-existing .bzl file; saving it creates ``def_name``."""
    return RuleFile(Path(path), "", def_name=def_name)


__all__ = [
    "DIRECTIVE_PREFIX",
    "Directive",
    "Load",
    "RawExpr",
    "Rule",
    "RuleFile",
    "empty_macro_file",
    "format_value",
    "load_file",
    "load_macro_file",
    "load_workspace_file",
    "quote",
]

"""Tree-sitter powered Java declaration source."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, NamedTuple, Optional, Set

import tree_sitter_java
from tree_sitter import Language, Node, Parser

from .base import DeclarationSource, SourceError
from ..logging import get_logger
from ..models import STRING_TYPE, AnnotationValue, Element, FieldElement

JAVA_LANGUAGE = Language(tree_sitter_java.language())

_TYPE_NODES = {
    "class_declaration": "class",
    "interface_declaration": "interface",
    "enum_declaration": "enum",
    "record_declaration": "record",
    "annotation_type_declaration": "annotation",
}

_FIELD_NODES = {"field_declaration", "constant_declaration"}

_METHOD_NODES = {
    "method_declaration": "method",
    "annotation_type_element_declaration": "method",
    "constructor_declaration": "constructor",
    "compact_constructor_declaration": "constructor",
}

_COMMENT_NODES = {"line_comment", "block_comment"}

_INTEGER_LITERALS = {
    "decimal_integer_literal",
    "hex_integer_literal",
    "octal_integer_literal",
    "binary_integer_literal",
}

_PRIMITIVE_TYPES = {"boolean", "byte", "char", "short", "int", "long", "float", "double"}

_NUMERIC_TYPES = {"int", "long", "char"}

_INTEGER_BITS = {"int": 32, "long": 64}

JAVA_LANG_TYPES = frozenset(
    {
        "Boolean", "Byte", "CharSequence", "Character", "Class", "Comparable",
        "Deprecated", "Double", "Enum", "Error", "Exception", "Float",
        "FunctionalInterface", "Integer", "Iterable", "Long", "Math", "Number",
        "Object", "Override", "Record", "Runnable", "RuntimeException",
        "SafeVarargs", "Short", "String", "StringBuilder", "SuppressWarnings",
        "System", "Thread", "Throwable", "Void",
    }
)

_ESCAPE_RE = re.compile(r"\\(u+[0-9a-fA-F]{4}|[0-3][0-7]{0,2}|[4-7][0-7]?|[btnfrs\"'\\]|\r\n?|\n)")
_SURROGATE_RE = re.compile("[\ud800-\udfff]")

_SIMPLE_ESCAPES = {
    "b": "\b",
    "t": "\t",
    "n": "\n",
    "f": "\f",
    "r": "\r",
    "s": " ",
    '"': '"',
    "'": "'",
    "\\": "\\",
}


class _Const(NamedTuple):
    java_type: str
    value: Any


@dataclass
class _CompilationUnit:
    path: Path
    package: str = ""
    single_imports: Dict[str, str] = field(default_factory=dict)
    on_demand: List[str] = field(default_factory=list)
    static_imports: Dict[str, str] = field(default_factory=dict)
    static_on_demand: List[str] = field(default_factory=list)
    top_level: Dict[str, str] = field(default_factory=dict)


@dataclass(eq=False)
class _TypeDecl:
    unit: _CompilationUnit
    node: Node
    kind: str
    simple_name: str
    qualified_name: str
    enclosing: Optional["_TypeDecl"] = None
    member_types: Dict[str, str] = field(default_factory=dict)
    fields: Dict[str, "_FieldDecl"] = field(default_factory=dict)
    methods: List[Node] = field(default_factory=list)

    @property
    def implicitly_final_fields(self) -> bool:
        return self.kind in {"interface", "annotation"}


@dataclass(eq=False)
class _FieldDecl:
    owner: _TypeDecl
    name: str
    type_node: Optional[Node]
    dimensions: int
    final: bool
    initializer: Optional[Node]
    modifiers: Optional[Node]
    line: int


class JavaSourceReader(DeclarationSource):
    """Builds the program model from Java sources.

    Files are parsed once, on first access. Type names are resolved the way
    javac would for the subset of the language that matters here: member
    types, single-type imports, same-file and same-package types,
    ``java.lang`` and on-demand imports of ``known_types``. Constant
    expressions cover literals, text blocks, parentheses, unary operators,
    ``+`` with int and long overflow, and references to constant fields of
    parsed types.
    """

    def __init__(self, files: Iterable[Path], *, known_types: Iterable[str] = ()) -> None:
        self.files = [Path(path) for path in files]
        self.known_types: Set[str] = set(known_types)
        self.logger = get_logger("sources.java")
        self._parser = Parser(JAVA_LANGUAGE)
        self._elements: Optional[List[Element]] = None
        self._decls: List[_TypeDecl] = []
        self._types: Dict[str, _TypeDecl] = {}
        self._memo: Dict[_FieldDecl, Optional[_Const]] = {}
        self._active: Set[_FieldDecl] = set()

    def elements(self) -> List[Element]:
        if self._elements is None:
            for path in self.files:
                self._parse_file(path)
            self._elements = self._build_elements()
            self.logger.debug(
                "Parsed %d Java files into %d types", len(self.files), len(self._decls)
            )
        return list(self._elements)

    # -- parsing -----------------------------------------------------------------

    def _parse_file(self, path: Path) -> None:
        try:
            source = path.read_bytes()
        except OSError as exc:
            raise SourceError(f"Unable to read {path}: {exc}") from exc
        tree = self._parser.parse(source)
        root = tree.root_node
        if root.has_error:
            location = _first_error(root)
            line = location.start_point[0] + 1 if location is not None else 1
            raise SourceError(f"{path}:{line}: Java syntax error")

        unit = _CompilationUnit(path=path)
        for child in _named(root):
            if child.type == "package_declaration":
                unit.package = _text(_qualified_name_node(child))
            elif child.type == "import_declaration":
                _add_import(unit, child)
            elif child.type in _TYPE_NODES:
                self._collect_type(unit, child, None)

    def _collect_type(
        self, unit: _CompilationUnit, node: Node, enclosing: Optional[_TypeDecl]
    ) -> None:
        name = _text(node.child_by_field_name("name"))
        if enclosing is not None:
            qualified = f"{enclosing.qualified_name}.{name}"
            enclosing.member_types[name] = qualified
        else:
            qualified = f"{unit.package}.{name}" if unit.package else name
            unit.top_level[name] = qualified

        decl = _TypeDecl(
            unit=unit,
            node=node,
            kind=_TYPE_NODES[node.type],
            simple_name=name,
            qualified_name=qualified,
            enclosing=enclosing,
        )
        self._decls.append(decl)
        self._types[qualified] = decl

        body = node.child_by_field_name("body")
        if body is None:
            return
        for member in _body_members(body):
            if member.type in _FIELD_NODES:
                self._collect_fields(decl, member)
            elif member.type == "enum_constant":
                constant = _text(member.child_by_field_name("name"))
                decl.fields[constant] = _FieldDecl(
                    owner=decl,
                    name=constant,
                    type_node=None,
                    dimensions=0,
                    final=True,
                    initializer=None,
                    modifiers=_modifiers(member),
                    line=member.start_point[0] + 1,
                )
            elif member.type in _TYPE_NODES:
                self._collect_type(unit, member, decl)
            elif member.type in _METHOD_NODES:
                decl.methods.append(member)

    def _collect_fields(self, decl: _TypeDecl, node: Node) -> None:
        modifiers = _modifiers(node)
        final = decl.implicitly_final_fields or "final" in _keywords(modifiers)
        type_node = node.child_by_field_name("type")
        for declarator in node.children_by_field_name("declarator"):
            name = _text(declarator.child_by_field_name("name"))
            dimensions = declarator.child_by_field_name("dimensions")
            decl.fields[name] = _FieldDecl(
                owner=decl,
                name=name,
                type_node=type_node,
                dimensions=_text(dimensions).count("[") if dimensions is not None else 0,
                final=final,
                initializer=declarator.child_by_field_name("value"),
                modifiers=modifiers,
                line=declarator.start_point[0] + 1,
            )

    # -- model -------------------------------------------------------------------

    def _build_elements(self) -> List[Element]:
        elements: List[Element] = []
        for decl in self._decls:
            origin = f"{decl.unit.path}:{decl.node.start_point[0] + 1}"
            fields: List[FieldElement] = []
            for field_decl in decl.fields.values():
                const = self._field_constant(field_decl)
                fields.append(
                    FieldElement(
                        name=field_decl.name,
                        type_name=self._field_type_name(field_decl),
                        constant_value=const.value if const is not None else None,
                    )
                )
                annotations = self._annotations(field_decl.modifiers, decl)
                if annotations:
                    elements.append(
                        Element(
                            kind="field",
                            qualified_name=f"{decl.qualified_name}.{field_decl.name}",
                            annotations=annotations,
                            nested=True,
                            origin=f"{decl.unit.path}:{field_decl.line}",
                        )
                    )
            elements.append(
                Element(
                    kind=decl.kind,
                    qualified_name=decl.qualified_name,
                    annotations=self._annotations(_modifiers(decl.node), decl.enclosing, decl.unit),
                    nested=decl.enclosing is not None,
                    fields=fields,
                    origin=origin,
                )
            )
            for method in decl.methods:
                annotations = self._annotations(_modifiers(method), decl)
                if not annotations:
                    continue
                name_node = method.child_by_field_name("name")
                name = _text(name_node) if name_node is not None else decl.simple_name
                elements.append(
                    Element(
                        kind=_METHOD_NODES[method.type],
                        qualified_name=f"{decl.qualified_name}.{name}",
                        annotations=annotations,
                        nested=True,
                        origin=f"{decl.unit.path}:{method.start_point[0] + 1}",
                    )
                )
        return elements

    def _field_type_name(self, field_decl: _FieldDecl) -> str:
        if field_decl.type_node is None:
            return field_decl.owner.qualified_name
        name = self._type_name(field_decl.type_node, field_decl.owner)
        return name + "[]" * field_decl.dimensions

    def _type_name(self, node: Node, scope: _TypeDecl) -> str:
        if node.type in {"type_identifier", "scoped_type_identifier"}:
            return self._resolve_type(_text(node), scope.unit, scope)
        if node.type == "array_type":
            element = node.child_by_field_name("element")
            dimensions = node.child_by_field_name("dimensions")
            if element is not None:
                return self._type_name(element, scope) + "[]" * _text(dimensions).count("[")
        return _text(node)

    def _annotations(
        self,
        modifiers: Optional[Node],
        scope: Optional[_TypeDecl],
        unit: Optional[_CompilationUnit] = None,
    ) -> List[AnnotationValue]:
        if modifiers is None:
            return []
        unit = unit or (scope.unit if scope is not None else None)
        if unit is None:
            return []
        return [
            self._annotation(child, unit, scope)
            for child in _named(modifiers)
            if child.type in {"annotation", "marker_annotation"}
        ]

    def _annotation(
        self, node: Node, unit: _CompilationUnit, scope: Optional[_TypeDecl]
    ) -> AnnotationValue:
        name = self._resolve_type(_text(node.child_by_field_name("name")), unit, scope)
        values: Dict[str, Any] = {}
        arguments = node.child_by_field_name("arguments")
        if arguments is not None:
            for argument in _named(arguments):
                if argument.type == "element_value_pair":
                    key = _text(argument.child_by_field_name("key"))
                    value_node = argument.child_by_field_name("value")
                else:
                    key, value_node = "value", argument
                value = self._element_value(value_node, unit, scope)
                if value is not None:
                    values[key] = value
        return AnnotationValue(name=name, values=values)

    def _element_value(
        self, node: Optional[Node], unit: _CompilationUnit, scope: Optional[_TypeDecl]
    ) -> Any:
        if node is None:
            return None
        if node.type == "element_value_array_initializer":
            items = [self._element_value(child, unit, scope) for child in _named(node)]
            return tuple(item for item in items if item is not None)
        if node.type in {"annotation", "marker_annotation"}:
            return self._annotation(node, unit, scope)
        const = self._evaluate(node, unit, scope)
        return const.value if const is not None else None

    # -- name resolution ---------------------------------------------------------

    def _resolve_type(
        self, name: str, unit: _CompilationUnit, scope: Optional[_TypeDecl]
    ) -> str:
        head, _, rest = name.partition(".")
        if not rest:
            return self._resolve_simple(head, unit, scope, fallback=True) or head
        resolved = self._resolve_simple(head, unit, scope, fallback=False)
        if resolved is None:
            return name
        return f"{resolved}.{rest}"

    def _resolve_simple(
        self,
        name: str,
        unit: _CompilationUnit,
        scope: Optional[_TypeDecl],
        *,
        fallback: bool,
    ) -> Optional[str]:
        current = scope
        while current is not None:
            if current.simple_name == name:
                return current.qualified_name
            if name in current.member_types:
                return current.member_types[name]
            current = current.enclosing
        if name in unit.single_imports:
            return unit.single_imports[name]
        if name in unit.top_level:
            return unit.top_level[name]
        same_package = f"{unit.package}.{name}" if unit.package else name
        if same_package in self._types:
            return same_package
        for package in unit.on_demand:
            candidate = f"{package}.{name}"
            if candidate in self._types or candidate in self.known_types:
                return candidate
        if name in JAVA_LANG_TYPES:
            return f"java.lang.{name}"
        return same_package if fallback else None

    def _lookup_field(
        self, name: str, unit: _CompilationUnit, scope: Optional[_TypeDecl]
    ) -> Optional[_FieldDecl]:
        current = scope
        while current is not None:
            if name in current.fields:
                return current.fields[name]
            current = current.enclosing
        owner = self._types.get(unit.static_imports.get(name, ""))
        if owner is not None and name in owner.fields:
            return owner.fields[name]
        for owner_name in unit.static_on_demand:
            owner = self._types.get(owner_name)
            if owner is not None and name in owner.fields:
                return owner.fields[name]
        return None

    # -- constant evaluation -----------------------------------------------------

    def _field_constant(self, field_decl: _FieldDecl) -> Optional[_Const]:
        if field_decl in self._memo:
            return self._memo[field_decl]
        if field_decl in self._active:
            return None
        result: Optional[_Const] = None
        if field_decl.final and field_decl.initializer is not None and field_decl.dimensions == 0:
            type_name = self._field_type_name(field_decl)
            if type_name == STRING_TYPE or type_name in _PRIMITIVE_TYPES:
                self._active.add(field_decl)
                try:
                    result = self._evaluate(
                        field_decl.initializer, field_decl.owner.unit, field_decl.owner
                    )
                finally:
                    self._active.discard(field_decl)
                if result is not None and (type_name == STRING_TYPE) != (result.java_type == "String"):
                    result = None
        self._memo[field_decl] = result
        return result

    def _evaluate(
        self, node: Node, unit: _CompilationUnit, scope: Optional[_TypeDecl]
    ) -> Optional[_Const]:
        kind = node.type
        if kind == "string_literal":
            raw = _text(node)
            if raw.startswith('"""'):
                return _Const("String", _text_block(raw))
            return _Const("String", unescape_java(raw[1:-1]))
        if kind == "character_literal":
            return _Const("char", unescape_java(_text(node)[1:-1]))
        if kind in _INTEGER_LITERALS:
            return _integer(_text(node))
        if kind in {"true", "false"}:
            return _Const("boolean", kind == "true")
        if kind == "parenthesized_expression":
            inner = _named(node)
            return self._evaluate(inner[0], unit, scope) if inner else None
        if kind == "binary_expression":
            operator = node.child_by_field_name("operator")
            if operator is None or operator.type != "+":
                return None
            left = self._evaluate(node.child_by_field_name("left"), unit, scope)
            if left is None:
                return None
            right = self._evaluate(node.child_by_field_name("right"), unit, scope)
            if right is None:
                return None
            return _plus(left, right)
        if kind == "unary_expression":
            operator = node.child_by_field_name("operator")
            operand = self._evaluate(node.child_by_field_name("operand"), unit, scope)
            if operator is None or operand is None:
                return None
            return _unary(operator.type, operand)
        if kind == "identifier":
            target = self._lookup_field(_text(node), unit, scope)
            return self._field_constant(target) if target is not None else None
        if kind == "field_access":
            owner_name = self._resolve_type(
                _text(node.child_by_field_name("object")), unit, scope
            )
            owner = self._types.get(owner_name)
            if owner is None:
                return None
            target = owner.fields.get(_text(node.child_by_field_name("field")))
            return self._field_constant(target) if target is not None else None
        return None


def _plus(left: _Const, right: _Const) -> Optional[_Const]:
    if left.java_type == "String" or right.java_type == "String":
        return _Const("String", _to_string(left) + _to_string(right))
    if left.java_type in _NUMERIC_TYPES and right.java_type in _NUMERIC_TYPES:
        result_type = "long" if "long" in {left.java_type, right.java_type} else "int"
        return _wrap(result_type, _as_number(left) + _as_number(right))
    return None


def _unary(operator: str, operand: _Const) -> Optional[_Const]:
    if operator == "!":
        return _Const("boolean", not operand.value) if operand.java_type == "boolean" else None
    if operand.java_type not in _NUMERIC_TYPES:
        return None
    # unary numeric promotion: char becomes int
    java_type = "long" if operand.java_type == "long" else "int"
    value = _as_number(operand)
    if operator == "+":
        return _wrap(java_type, value)
    if operator == "-":
        return _wrap(java_type, -value)
    if operator == "~":
        return _wrap(java_type, ~value)
    return None


def _to_string(const: _Const) -> str:
    if const.java_type == "boolean":
        return "true" if const.value else "false"
    return str(const.value)


def _as_number(const: _Const) -> int:
    return ord(const.value) if const.java_type == "char" else int(const.value)


def _integer(text: str) -> Optional[_Const]:
    java_type = "long" if text[-1] in "lL" else "int"
    digits = text.replace("_", "").rstrip("lL").lower()
    try:
        if digits.startswith("0x"):
            value = int(digits[2:], 16)
        elif digits.startswith("0b"):
            value = int(digits[2:], 2)
        elif len(digits) > 1 and digits.startswith("0"):
            value = int(digits[1:], 8)
        else:
            value = int(digits)
    except ValueError:
        return None
    return _wrap(java_type, value)


def _wrap(java_type: str, value: int) -> _Const:
    """Truncate ``value`` to the two's complement range of ``java_type``."""
    bits = _INTEGER_BITS[java_type]
    value &= (1 << bits) - 1
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return _Const(java_type, value)


def unescape_java(body: str) -> str:
    """Decode the escape sequences of a Java string or char literal body.

    Unicode escapes yield UTF-16 code units; surrogate pairs are joined into
    a single code point and unpaired surrogates are kept as they are.
    """

    def _replace(match: re.Match[str]) -> str:
        token = match.group(1)
        if token[0] == "u":
            return chr(int(token.lstrip("u"), 16))
        if token[0] in "01234567":
            return chr(int(token, 8))
        if token[0] in "\r\n":
            return ""
        return _SIMPLE_ESCAPES[token]

    text = _ESCAPE_RE.sub(_replace, body)
    if _SURROGATE_RE.search(text) is None:
        return text
    return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")


def _text_block(raw: str) -> str:
    body = raw[3:-3].replace("\r\n", "\n").replace("\r", "\n")
    # Content starts on the line after the opening delimiter.
    _, _, body = body.partition("\n")
    lines = body.split("\n")
    significant = [line for line in lines[:-1] if line.strip()] + [lines[-1]]
    indent = min(len(line) - len(line.lstrip(" \t")) for line in significant)
    stripped = [line[indent:].rstrip(" \t") for line in lines]
    return unescape_java("\n".join(stripped))


def _add_import(unit: _CompilationUnit, node: Node) -> None:
    tokens = {child.type for child in node.children}
    name = _text(_qualified_name_node(node))
    is_static = "static" in tokens
    if "asterisk" in tokens:
        (unit.static_on_demand if is_static else unit.on_demand).append(name)
        return
    owner, _, simple = name.rpartition(".")
    if is_static:
        unit.static_imports[simple] = owner
    else:
        unit.single_imports[simple] = name


def _body_members(body: Node) -> Iterator[Node]:
    for child in _named(body):
        if child.type == "enum_body_declarations":
            yield from _named(child)
        else:
            yield child


def _modifiers(node: Node) -> Optional[Node]:
    for child in node.children:
        if child.type == "modifiers":
            return child
    return None


def _keywords(modifiers: Optional[Node]) -> Set[str]:
    if modifiers is None:
        return set()
    return {child.type for child in modifiers.children if not child.is_named}


def _qualified_name_node(node: Node) -> Optional[Node]:
    for child in node.named_children:
        if child.type in {"identifier", "scoped_identifier"}:
            return child
    return None


def _named(node: Node) -> List[Node]:
    return [child for child in node.named_children if child.type not in _COMMENT_NODES]


def _text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def _first_error(node: Node) -> Optional[Node]:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


__all__ = ["JAVA_LANGUAGE", "JavaSourceReader", "unescape_java"]

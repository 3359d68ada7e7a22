"""Flat, index-based abstract syntax tree."""

from __future__ import annotations

from collections.abc import Iterable
from enum import IntEnum, auto

from beleg.source_map import Span

NodeIndex = int


class NodeKind(IntEnum):
    """Kinds of syntax tree nodes."""

    INVALID = 0

    # Literals
    ID = auto()
    STR = auto()
    INT = auto()
    REAL = auto()
    CHAR = auto()
    BOOL = auto()
    UNIT = auto()
    SYMBOL = auto()

    # Collections
    LIST_OF = auto()
    TUPLE = auto()
    OBJECT = auto()

    # Unary operations
    BOOL_NOT = auto()
    SELF_LOWER = auto()
    SELF_CAP = auto()
    NULL = auto()

    OPTIONAL_TYPE = auto()
    POINTER_TYPE = auto()
    FUNCTION_TYPE = auto()

    # Ranges
    RANGE_FULL = auto()
    RANGE_TO = auto()
    RANGE_TO_INCLUSIVE = auto()
    RANGE_FROM = auto()
    RANGE_FROM_TO = auto()
    RANGE_FROM_TO_INCLUSIVE = auto()

    # Binary operations
    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    MOD = auto()
    ADD_ADD = auto()
    BOOL_EQ = auto()
    BOOL_NOT_EQ = auto()
    BOOL_AND = auto()
    BOOL_OR = auto()
    BOOL_GT = auto()
    BOOL_GT_EQ = auto()
    BOOL_LT = auto()
    BOOL_LT_EQ = auto()

    SELECT = auto()
    IMAGE = auto()

    # Dereference and reference
    DEREF = auto()
    REFER = auto()
    TYPE_CAST = auto()

    # Calls
    CALL = auto()
    INDEX_CALL = auto()
    OBJECT_CALL = auto()

    # Pattern matching
    POST_MATCH = auto()
    PATTERN_ARM = auto()
    CONDITION_ARM = auto()
    CATCH_ARM = auto()

    # Statements
    EXPR_STATEMENT = auto()
    ASSIGN = auto()
    ADD_ASSIGN = auto()
    SUB_ASSIGN = auto()
    MUL_ASSIGN = auto()
    DIV_ASSIGN = auto()
    CONST_DECL = auto()
    LET_DECL = auto()
    RETURN_STATEMENT = auto()
    BREAK_STATEMENT = auto()
    CONTINUE_STATEMENT = auto()
    IF_STATEMENT = auto()
    WHEN_STATEMENT = auto()
    WHILE_LOOP = auto()
    FOR_LOOP = auto()

    # Patterns
    PATTERN_IF_GUARD = auto()
    PATTERN_AS_BIND = auto()
    PATTERN_OPTION_SOME = auto()
    PATTERN_OBJECT_CALL = auto()
    PATTERN_RANGE_TO = auto()
    PATTERN_RANGE_TO_INCLUSIVE = auto()
    PATTERN_RANGE_FROM = auto()
    PATTERN_RANGE_FROM_TO = auto()
    PATTERN_RANGE_FROM_TO_INCLUSIVE = auto()
    PROPERTY_PATTERN = auto()
    PATTERN_RECORD = auto()
    PATTERN_LIST = auto()
    PATTERN_TUPLE = auto()

    # Items / definitions
    FUNCTION_DEF = auto()
    STRUCT_DEF = auto()
    STRUCT_FIELD = auto()
    ENUM_DEF = auto()
    ENUM_VARIANT_WITH_PATTERN = auto()
    UNION_DEF = auto()
    UNION_VARIANT = auto()
    TYPEALIAS = auto()
    NEWTYPE = auto()
    MODULE_DEF = auto()

    # Imports
    MOD_STATEMENT = auto()
    USE_STATEMENT = auto()
    PATH_SELECT = auto()
    PATH_SELECT_MULTI = auto()
    PATH_SELECT_ALL = auto()
    SUPER_PATH = auto()
    PACKAGE_PATH = auto()
    PATH_AS_BIND = auto()

    # Parameters
    PARAM_TYPED = auto()
    PARAM_SELF = auto()
    PARAM_SELF_REF = auto()

    BLOCK = auto()

    FILE_SCOPE = auto()


class NodeType(IntEnum):
    """Structural classification of a node's children."""

    NO_CHILD = 0
    SINGLE_CHILD = auto()
    DOUBLE_CHILDREN = auto()
    TRIPLE_CHILDREN = auto()
    QUADRUPLE_CHILDREN = auto()
    MULTI_CHILDREN = auto()
    SINGLE_WITH_MULTI_CHILDREN = auto()
    DOUBLE_WITH_MULTI_CHILDREN = auto()
    TRIPLE_WITH_MULTI_CHILDREN = auto()
    FUNCTION_DEF_CHILDREN = auto()
    DIAMOND_FUNCTION_DEF_CHILDREN = auto()
    EFFECT_DEF_CHILDREN = auto()
    HANDLES_DEF_CHILDREN = auto()
    TYPE_DEF_CHILDREN = auto()
    TRAIT_DEF_CHILDREN = auto()
    IMPL_TRAIT_DEF_CHILDREN = auto()
    EXTEND_TRAIT_DEF_CHILDREN = auto()
    DERIVE_DEF_CHILDREN = auto()
    TYPE_ALIAS_CHILDREN = auto()


class Child:
    """One child entry of a node being built: a single index or a list of indices."""

    __slots__ = ("_value",)

    def __init__(self, value: NodeIndex | tuple[NodeIndex, ...]) -> None:
        self._value = value

    @classmethod
    def single(cls, index: NodeIndex) -> Child:
        return cls(int(index))

    @classmethod
    def multiple(cls, indices: Iterable[NodeIndex]) -> Child:
        return cls(tuple(indices))

    def is_single(self) -> bool:
        return not isinstance(self._value, tuple)

    def is_multiple(self) -> bool:
        return isinstance(self._value, tuple)

    def as_single(self) -> NodeIndex:
        if isinstance(self._value, tuple):
            raise TypeError("child holds multiple indices")
        return self._value

    def as_multiple(self) -> tuple[NodeIndex, ...]:
        if not isinstance(self._value, tuple):
            raise TypeError("child holds a single index")
        return self._value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Child):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        kind = "multiple" if self.is_multiple() else "single"
        return f"Child.{kind}({self._value!r})"


class NodeBuilder:
    """Fluent description of a node to be added to an :class:`Ast`."""

    def __init__(self, kind: NodeKind, span: Span) -> None:
        self._kind = kind
        self._span = span
        self._children: list[Child] = []

    def add_single_child(self, child: NodeIndex) -> NodeBuilder:
        self._children.append(Child.single(child))
        return self

    def add_multiple_children(self, children: Iterable[NodeIndex]) -> NodeBuilder:
        self._children.append(Child.multiple(children))
        return self

    def with_span(self, span: Span) -> NodeBuilder:
        self._span = span
        return self

    def with_children(self, children: Iterable[Child]) -> NodeBuilder:
        self._children = list(children)
        return self

    def with_node_kind(self, kind: NodeKind) -> NodeBuilder:
        self._kind = kind
        return self

    @property
    def kind(self) -> NodeKind:
        return self._kind

    @property
    def span(self) -> Span:
        return self._span

    @property
    def children(self) -> tuple[Child, ...]:
        return tuple(self._children)


class Ast:
    """Syntax tree stored as flat arrays; index 0 is a reserved invalid node."""

    def __init__(self) -> None:
        self._nodes: list[NodeKind] = [NodeKind.INVALID]
        self._spans: list[Span] = [Span()]
        self._ranges: list[tuple[int, int]] = [(0, 0)]
        # Flattened storage: direct child entries and length-prefixed slices.
        self._children: list[int] = [0]
        self._root: NodeIndex = 0

    def add_node(self, builder: NodeBuilder) -> NodeIndex:
        """Append a node and return its index."""
        entries: list[int] = []
        for child in builder.children:
            if child.is_single():
                entries.append(child.as_single())
            else:
                indices = child.as_multiple()
                entries.append(len(self._children))
                self._children.append(len(indices))
                self._children.extend(indices)

        node_index = len(self._nodes)
        start = len(self._children)
        self._children.extend(entries)
        self._nodes.append(builder.kind)
        self._spans.append(builder.span)
        self._ranges.append((start, len(self._children)))
        return node_index

    def _valid(self, node_index: NodeIndex) -> bool:
        return 0 < node_index < len(self._nodes)

    def get_children(self, node_index: NodeIndex) -> tuple[NodeIndex, ...]:
        """Direct child entries of a node; empty for invalid indices."""
        if not self._valid(node_index):
            return ()
        start, end = self._ranges[node_index]
        return tuple(self._children[start:end])

    def get_node_kind(self, node_index: NodeIndex) -> NodeKind | None:
        if not self._valid(node_index):
            return None
        return self._nodes[node_index]

    def get_node(
        self, node_index: NodeIndex
    ) -> tuple[NodeKind, Span, tuple[NodeIndex, ...]] | None:
        """Kind, span and children of a node, or None for invalid indices."""
        if not self._valid(node_index):
            return None
        return (
            self._nodes[node_index],
            self._spans[node_index],
            self.get_children(node_index),
        )

    def get_span(self, node_index: NodeIndex) -> Span | None:
        if not self._valid(node_index):
            return None
        return self._spans[node_index]

    def get_multi_child_slice(
        self, slice_len_index: NodeIndex
    ) -> tuple[NodeIndex, ...] | None:
        """Indices of a multiple-children entry, given the entry's reference."""
        if slice_len_index == 0 or slice_len_index >= len(self._children):
            return None
        count = self._children[slice_len_index]
        data_start = slice_len_index + 1
        data_end = data_start + count
        if data_end > len(self._children):
            return None
        return tuple(self._children[data_start:data_end])

    def set_root(self, root: NodeIndex) -> None:
        self._root = root

    @property
    def root(self) -> NodeIndex:
        return self._root

    @property
    def nodes(self) -> tuple[NodeKind, ...]:
        return tuple(self._nodes)

    @property
    def spans(self) -> tuple[Span, ...]:
        return tuple(self._spans)


_NODE_TYPES: dict[NodeKind, NodeType] = {}


def _classify(node_type: NodeType, *kinds: NodeKind) -> None:
    for kind in kinds:
        _NODE_TYPES[kind] = node_type


_K = NodeKind
_classify(
    NodeType.SINGLE_CHILD,
    _K.BOOL_NOT, _K.OPTIONAL_TYPE, _K.POINTER_TYPE, _K.FUNCTION_TYPE,
    _K.RANGE_TO, _K.RANGE_TO_INCLUSIVE, _K.RANGE_FROM, _K.DEREF, _K.REFER,
    _K.TYPE_CAST, _K.EXPR_STATEMENT, _K.PATTERN_OPTION_SOME,
    _K.PATTERN_RANGE_TO, _K.PATTERN_RANGE_TO_INCLUSIVE, _K.PATTERN_RANGE_FROM,
    _K.MOD_STATEMENT, _K.USE_STATEMENT, _K.PATH_SELECT_ALL, _K.SUPER_PATH,
    _K.PACKAGE_PATH, _K.RETURN_STATEMENT, _K.BREAK_STATEMENT,
    _K.CONTINUE_STATEMENT,
)
_classify(
    NodeType.DOUBLE_CHILDREN,
    _K.RANGE_FROM_TO, _K.RANGE_FROM_TO_INCLUSIVE, _K.ADD, _K.SUB, _K.MUL,
    _K.DIV, _K.MOD, _K.ADD_ADD, _K.BOOL_EQ, _K.BOOL_NOT_EQ, _K.BOOL_AND,
    _K.BOOL_OR, _K.BOOL_GT, _K.BOOL_GT_EQ, _K.BOOL_LT, _K.BOOL_LT_EQ,
    _K.SELECT, _K.IMAGE, _K.INDEX_CALL, _K.PATTERN_ARM, _K.CONDITION_ARM,
    _K.CATCH_ARM, _K.PATTERN_RANGE_FROM_TO, _K.PATTERN_RANGE_FROM_TO_INCLUSIVE,
    _K.PROPERTY_PATTERN, _K.STRUCT_FIELD, _K.UNION_VARIANT, _K.PATH_SELECT,
    _K.PATH_AS_BIND, _K.PARAM_TYPED, _K.ASSIGN, _K.ADD_ASSIGN, _K.SUB_ASSIGN,
    _K.MUL_ASSIGN, _K.DIV_ASSIGN,
)
_classify(
    NodeType.TRIPLE_CHILDREN,
    _K.CONST_DECL, _K.LET_DECL, _K.IF_STATEMENT, _K.WHILE_LOOP,
    _K.PATTERN_IF_GUARD, _K.PATTERN_AS_BIND,
)
_classify(NodeType.QUADRUPLE_CHILDREN, _K.FOR_LOOP)
_classify(
    NodeType.MULTI_CHILDREN,
    _K.LIST_OF, _K.TUPLE, _K.OBJECT, _K.BLOCK, _K.PATTERN_RECORD,
    _K.PATTERN_LIST, _K.PATTERN_TUPLE, _K.WHEN_STATEMENT, _K.FILE_SCOPE,
)
_classify(
    NodeType.SINGLE_WITH_MULTI_CHILDREN,
    _K.CALL, _K.OBJECT_CALL, _K.POST_MATCH, _K.PATTERN_OBJECT_CALL,
)
_classify(NodeType.FUNCTION_DEF_CHILDREN, _K.FUNCTION_DEF)
_classify(
    NodeType.TYPE_DEF_CHILDREN,
    _K.STRUCT_DEF, _K.ENUM_DEF, _K.UNION_DEF, _K.MODULE_DEF,
)
_classify(NodeType.TYPE_ALIAS_CHILDREN, _K.TYPEALIAS, _K.NEWTYPE)
del _K


def get_node_type(kind: NodeKind) -> NodeType:
    """Structural classification of a node kind; leaves default to NO_CHILD."""
    return _NODE_TYPES.get(kind, NodeType.NO_CHILD)
import pytest

from beleg.ast import (
    Ast,
    Child,
    NodeBuilder,
    NodeKind,
    NodeType,
    get_node_type,
)
from beleg.source_map import Span


def test_basic_construction():
    ast = Ast()
    assert ast.root == 0
    assert len(ast.nodes) == 1
    assert len(ast.spans) == 1
    assert ast.get_node_kind(0) is None
    assert ast.get_span(0) is None
    assert ast.get_children(0) == ()


def test_node_creation():
    ast = Ast()
    id_node = ast.add_node(NodeBuilder(NodeKind.ID, Span(0, 3)))
    assert id_node == 1
    assert len(ast.nodes) == 2

    info = ast.get_node(id_node)
    assert info is not None
    kind, span, children = info
    assert kind == NodeKind.ID
    assert span.start == 0
    assert span.end == 3
    assert children == ()


def test_node_with_children():
    ast = Ast()
    left = ast.add_node(NodeBuilder(NodeKind.INT, Span(0, 1)))
    right = ast.add_node(NodeBuilder(NodeKind.INT, Span(2, 3)))
    parent = ast.add_node(
        NodeBuilder(NodeKind.ADD, Span(0, 3))
        .add_single_child(left)
        .add_single_child(right)
    )

    info = ast.get_node(parent)
    assert info is not None
    kind, _span, children = info
    assert kind == NodeKind.ADD
    assert children == (left, right)


def test_multiple_children():
    ast = Ast()
    params = [
        ast.add_node(NodeBuilder(NodeKind.ID, Span(10, 11))),
        ast.add_node(NodeBuilder(NodeKind.ID, Span(13, 14))),
    ]
    builder = NodeBuilder(NodeKind.FUNCTION_DEF, Span(0, 20))
    builder.add_single_child(ast.add_node(NodeBuilder(NodeKind.ID, Span(5, 8))))
    builder.add_multiple_children(params)
    func_node = ast.add_node(builder)

    info = ast.get_node(func_node)
    assert info is not None
    kind, _span, children = info
    assert kind == NodeKind.FUNCTION_DEF
    assert len(children) == 2

    params_slice = ast.get_multi_child_slice(children[1])
    assert params_slice == (params[0], params[1])


def test_children_of_earlier_nodes_are_not_affected_by_later_slices():
    ast = Ast()
    name = ast.add_node(NodeBuilder(NodeKind.ID, Span(0, 1)))
    ast.add_node(
        NodeBuilder(NodeKind.CALL, Span(0, 5))
        .add_single_child(name)
        .add_multiple_children([name, name])
    )
    assert ast.get_children(name) == ()


def test_node_type_classification():
    assert get_node_type(NodeKind.ID) == NodeType.NO_CHILD
    assert get_node_type(NodeKind.ADD) == NodeType.DOUBLE_CHILDREN
    assert get_node_type(NodeKind.CALL) == NodeType.SINGLE_WITH_MULTI_CHILDREN
    assert get_node_type(NodeKind.FUNCTION_DEF) == NodeType.FUNCTION_DEF_CHILDREN
    assert get_node_type(NodeKind.BLOCK) == NodeType.MULTI_CHILDREN


@pytest.mark.parametrize(
    "kind, expected",
    [
        (NodeKind.FOR_LOOP, NodeType.QUADRUPLE_CHILDREN),
        (NodeKind.LET_DECL, NodeType.TRIPLE_CHILDREN),
        (NodeKind.RETURN_STATEMENT, NodeType.SINGLE_CHILD),
        (NodeKind.STRUCT_DEF, NodeType.TYPE_DEF_CHILDREN),
        (NodeKind.NEWTYPE, NodeType.TYPE_ALIAS_CHILDREN),
        (NodeKind.PATH_SELECT_MULTI, NodeType.NO_CHILD),
        (NodeKind.ENUM_VARIANT_WITH_PATTERN, NodeType.NO_CHILD),
        (NodeKind.RANGE_FULL, NodeType.NO_CHILD),
    ],
)
def test_node_type_other_kinds(kind, expected):
    assert get_node_type(kind) == expected


def test_enum_numbering():
    assert NodeKind.INVALID == 0
    assert NodeKind.ID == 1
    assert int(get_node_type(NodeKind.ADD)) == 2
    assert int(get_node_type(NodeKind.FUNCTION_DEF)) == 9
    assert int(get_node_type(NodeKind.ID)) == 0


def test_span_operations():
    span = Span(10, 20)
    assert span.is_valid()
    assert span.length() == 10
    assert span.contains(15)
    assert not span.contains(25)
    shifted = span.with_offset(5)
    assert (shifted.start, shifted.end) == (15, 25)


def test_child_operations():
    single = Child.single(42)
    assert single.is_single()
    assert not single.is_multiple()
    assert single.as_single() == 42

    multiple = Child.multiple([1, 2, 3])
    assert not multiple.is_single()
    assert multiple.is_multiple()
    assert multiple.as_multiple() == (1, 2, 3)


def test_child_wrong_accessor_raises():
    with pytest.raises(TypeError):
        Child.multiple([1]).as_single()
    with pytest.raises(TypeError):
        Child.single(1).as_multiple()


def test_node_builder_operations():
    builder = NodeBuilder(NodeKind.ADD, Span(0, 5))
    assert builder.kind == NodeKind.ADD
    assert builder.span == Span(0, 5)
    assert builder.children == ()

    builder.add_single_child(1)
    builder.add_single_child(2)
    assert len(builder.children) == 2
    assert all(child.is_single() for child in builder.children)

    fluent = (
        NodeBuilder(NodeKind.MUL, Span(10, 15))
        .add_single_child(3)
        .add_single_child(4)
        .with_span(Span(10, 20))
    )
    assert fluent.kind == NodeKind.MUL
    assert fluent.span.start == 10
    assert fluent.span.end == 20
    assert len(fluent.children) == 2


def test_node_builder_with_children_and_kind():
    builder = (
        NodeBuilder(NodeKind.ADD, Span(0, 1))
        .add_single_child(9)
        .with_children([Child.single(1), Child.multiple([2, 3])])
        .with_node_kind(NodeKind.CALL)
    )
    assert builder.kind == NodeKind.CALL
    assert builder.children == (Child.single(1), Child.multiple([2, 3]))


def test_root_node_management():
    ast = Ast()
    assert ast.root == 0
    root = ast.add_node(NodeBuilder(NodeKind.FILE_SCOPE, Span(0, 100)))
    ast.set_root(root)
    assert ast.root == root


def test_invalid_node_access():
    ast = Ast()
    assert ast.get_node_kind(999) is None
    assert ast.get_span(999) is None
    assert ast.get_children(999) == ()
    assert ast.get_node(999) is None
    assert ast.get_multi_child_slice(999) is None
    assert ast.get_multi_child_slice(0) is None


def test_demo_walkthrough():
    ast = Ast()
    int1 = ast.add_node(NodeBuilder(NodeKind.INT, Span(0, 1)))
    int2 = ast.add_node(NodeBuilder(NodeKind.INT, Span(4, 5)))
    assert (int1, int2) == (1, 2)

    add_expr = ast.add_node(
        NodeBuilder(NodeKind.ADD, Span(0, 5))
        .add_single_child(int1)
        .add_single_child(int2)
    )
    assert add_expr == 3

    var_name = ast.add_node(NodeBuilder(NodeKind.ID, Span(10, 11)))
    let_decl = ast.add_node(
        NodeBuilder(NodeKind.LET_DECL, Span(6, 5))
        .add_single_child(var_name)
        .add_single_child(add_expr)
    )
    assert let_decl == 5

    kind, span, children = ast.get_node(add_expr)
    assert kind == NodeKind.ADD
    assert span == Span(0, 5)
    assert children == (1, 2)

    func_name = ast.add_node(NodeBuilder(NodeKind.ID, Span(20, 23)))
    params = [
        ast.add_node(NodeBuilder(NodeKind.ID, Span(25, 26))),
        ast.add_node(NodeBuilder(NodeKind.ID, Span(28, 29))),
    ]
    return_expr = ast.add_node(NodeBuilder(NodeKind.ADD, Span(35, 39)))
    return_stmt = ast.add_node(
        NodeBuilder(NodeKind.RETURN_STATEMENT, Span(32, 39)).add_single_child(
            return_expr
        )
    )
    func_def = ast.add_node(
        NodeBuilder(NodeKind.FUNCTION_DEF, Span(15, 40))
        .add_single_child(func_name)
        .add_multiple_children(params)
        .add_single_child(return_stmt)
    )
    assert func_def == 11

    _kind, _span, func_children = ast.get_node(func_def)
    assert len(func_children) == 3
    assert func_children[0] == func_name
    assert func_children[2] == return_stmt
    assert ast.get_multi_child_slice(func_children[1]) == (7, 8)

    ast.set_root(func_def)
    assert len(ast.nodes) == 12
    assert ast.root == 11
    assert ast.get_children(0) == ()
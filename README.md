# beleg

Building blocks for a compiler front end for the Beleg language (`.bl` / `.beleg`
source files).

## Modules

- `beleg.source_map`: `SourceMap` holds source files laid out one after another
  in a single global position space. `lookup_location` turns a global position
  into a `Location` (`FileId`, 1-based line, 0-based column), and
  `lookup_byte_pos` turns a location back into a position. `get_span_text`
  returns the text under a `Span`, which may cross file boundaries.
  `make_span` builds a span from line/column pairs. `format_location` and
  `format_span` render `name:line:column`, with the column shown 1-based.
  `add_file` returns the existing id when a name is registered a second time.
  `load_file` reads a file from disk and returns `None` when it cannot be read.
- `beleg.lex`: a hand-written lexer. `Lexer.next()` returns one `Token` at a
  time. It returns an `EOF` token once the input is used up. An unrecognised
  character gives an empty `INVALID` token. `tokenize(src)` returns every token
  up to and including the `EOF` or the first `INVALID` token. `lexeme(kind)` gives
  the printable form of a `TokenKind`. `keyword_kind(ident)` returns the keyword
  kind of an identifier, or `None` if it is not a keyword.
- `beleg.ast`: a flat, index-based syntax tree. You describe a node with
  `NodeBuilder` and store it with `Ast.add_node`, which returns its index. Index 0
  is reserved as invalid. Read nodes back with `Ast.get_node`,
  `Ast.get_children` and `Ast.get_multi_child_slice`. `get_node_type(kind)`
  classifies each `NodeKind` by the shape of its children.
- `beleg.diag`: diagnostics. `DiagCtxt` counts errors and warnings against the
  limits in `DiagCtxtOptions`. It drops diagnostics that go over a limit and
  passes the rest to its emitters. `DiagCtxt.diag_builder` returns a fluent
  `DiagBuilder` with `code`, `label`, `span_label`, `note` and `emit`.
  `create_terminal_emitter(output, use_colors, use_unicode, source_map)` renders
  each diagnostic as text: a header, the labelled source lines with underlines,
  and notes. It can use ANSI colours and Unicode box drawing.
- `beleg.parse`: parser scaffolding. `Parser` works over a list of tokens and
  keeps a cursor stack. `scoped_guard()` is a context manager that enters a
  nested scope. `current_span()` covers the tokens consumed since the innermost
  scope began. `ParseError` is both an exception and an `Issue` that reports
  itself through a `DiagCtxt`.
- `beleg.vfs`: a virtual view of a project directory. `Vfs.build_from_fs(path)`
  scans a directory and raises `VfsError` if the path is missing, is not a
  directory, or cannot be read. A built tree can:
  - resolve paths such as `"src/main.bl"`;
  - list a directory's children;
  - find a directory's entry file (`main.bl` for source roots, `mod.bl` for
    module directories);
  - attach a source `FileId` and an `Ast` to file nodes.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command line

```
beleg
```

This prints three sample tokens:

```
Token(and, 0, 3), Token(or, 4, 6), Token(+, 7, 8)
```

## Example

```python
import sys

from beleg.diag import DiagCtxt, DiagCtxtOptions, DiagLevel, create_terminal_emitter
from beleg.source_map import SourceMap, Span

source_map = SourceMap()
source_map.add_file(
    "example.bl",
    "fn main() {\n    let x = undefined_variable;\n}",
)

ctxt = DiagCtxt(DiagCtxtOptions(), source_map)
ctxt.add_emitter(create_terminal_emitter(sys.stdout, True, True, source_map))

span = Span(24, 42)
(
    ctxt.diag_builder(DiagLevel.ERROR, "undefined variable", span)
    .code(4002)
    .label(span, "not found in this scope")
    .note("perhaps you meant to declare this variable?")
    .emit()
)
```

## What it does not do

This is not a working compiler. `Parser.parse` has no grammar rules: it only
adds a single `FILE_SCOPE` node to the tree and makes it the root. There is no
semantic analysis and no code generation. The `beleg` command does not read or
compile source files.
from enum import Enum
from typing import \
    Any, \
    TypeVar, \
    Callable, \
    Optional, \
    Union, \
    overload, \
    Sequence, \
    List, \
    Tuple, \
    Dict, \
    FrozenSet, \
    NamedTuple, \
    Iterator, \
    Iterable, \
    TextIO
from abc import ABC, abstractmethod
from logging import getLogger
from anytree import Node, NodeMixin, PreOrderIter, RenderTree  # type:ignore

import argparse
import io
import logging
import operator
import os
import re
import sys
import typing

T = TypeVar('T')

lexer_logger = getLogger("lexer")
parser_logger = getLogger("parser")
runtime_logger = getLogger("runtime")
codegen_logger = getLogger("codegen")


def assert_with(cond: bool, err: Exception) -> None:
    if not cond:
        raise err


def any_of(vals: Iterable[T], pred: Callable[[T], bool]) -> bool:
    for val in vals:
        if pred(val):
            return True
    return False


def to_camel_case(s: str) -> str:
    s = re.sub(r"^\W*(\w)", lambda m: m[1].upper(), s)
    s = re.sub(r"[_\W]+(\w)", lambda m: m[1].upper(), s)
    return re.sub(r"\W", "", s)


@overload
def cast(ty: typing.Type[T], val: Any) -> T:
    pass


@overload
def cast(ty: Iterable[typing.Type], val: Any) -> Any:
    pass


@overload
def cast(ty: None, val: Any) -> None:
    pass


def cast(ty, val):
    ty = type(None) if ty is None else ty
    tys = ty if isinstance(ty, Iterable) else [ty]

    assert any_of(tys, lambda ty2: isinstance(val, ty2)), \
        f"val is type {type(val)} which is not a subtype of any of {tys}"
    return val


def setup_logging(verbose: bool) -> None:
    logging.disable(logging.NOTSET)
    logging.basicConfig(format="{message}", style="{")
    if verbose:
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.INFO)


class TokenTypeValue(NamedTuple):
    pat: str
    re: bool = False


class Position(NamedTuple):
    line: int
    col: int


class TokenType(Enum):
    KEYWORD = TokenTypeValue(pat=r"if|then|else|while|print|read", re=True)
    NUMBER = TokenTypeValue(pat=r"[0-9]+", re=True)
    STRINGLITERAL = TokenTypeValue(pat=r'"[^"]*"', re=True)
    OPERATOR = TokenTypeValue(pat=r"==|!=|<=|>=|[+\-*/<=>!]", re=True)
    PUNCTUATION = TokenTypeValue(pat=r"[;(){}]", re=True)
    IDENTIFIER = TokenTypeValue(pat=r"[a-zA-Z]+", re=True)
    EOF = TokenTypeValue(pat="")

    def __repr__(self) -> str:
        return str(self)

    @staticmethod
    def pattern(ident: 'TokenType') -> str:
        pat = ident.value.pat or ''
        return pat if ident.value.re else re.escape(pat)


class Token:
    def __init__(self, ty: TokenType, value: str, pos: Position) -> None:
        self.type: TokenType = ty
        self.value: str = value
        self.pos: Position = pos

    def __str__(self) -> str:
        return f"{type(self).__name__}({self.type.name}, {self.value})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}" \
               f"({self.type.name}, {self.value!r}, {self.pos})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Token) and \
               self.type == other.type and \
               self.value == other.value and \
               self.pos == other.pos

    def __ne__(self, other) -> bool:
        return not self.__eq__(other)


class ErrorCode(Enum):
    UNEXPECTED_TOKEN = 'Unexpected token'
    UNDEFINED_VARIABLE = 'Undefined variable'
    DIVISION_BY_ZERO = 'Division by zero'
    UNSUPPORTED_OPERATOR = 'Unsupported operator'
    UNSUPPORTED_OPERAND = 'Unsupported operand'
    BAD_PRINT_TARGET = 'Unsupported print target'
    UNSUPPORTED_NODE = 'Node cannot be translated'
    BAD_INPUT = 'Input is not an integer'
    INPUT_EXHAUSTED = 'Input exhausted'


class Error(Exception):
    def __init__(
            self,
            error_code: ErrorCode,
            token: Optional[Token] = None,
            appended_message: Optional[Union[str, Callable[[], str]]] = None,
            message: Optional[Union[str, Callable[[], str]]] = None
    ):
        self.error_code: ErrorCode = error_code
        self.token: Optional[Token] = token

        message2 = message() if callable(message) else message
        appended_message2 = appended_message() if callable(appended_message) \
            else appended_message

        if message2 is None:
            message2 = error_code.value if token is None \
                else f"{error_code.value} -> {token!r}"
        if appended_message2:
            message2 += f". {appended_message2}"

        self.message = f"{type(self).__name__}: {message2}"
        super().__init__(self.message)


class ParserError(Error):
    pass


class EvalError(Error):
    pass


class GenError(Error):
    pass


class InputError(Error):
    pass


class Lexer(Iterable[Token]):
    __TOKEN_PATTERN: Optional['re.Pattern[str]'] = None

    @classmethod
    def _token_pattern(cls) -> 're.Pattern[str]':
        if cls.__TOKEN_PATTERN is None:
            token_pats = [
                rf"\s*(?P<{tty.name}>{TokenType.pattern(tty)})"
                for tty in TokenType
                if tty != TokenType.EOF
            ]
            cls.__TOKEN_PATTERN = re.compile("|".join(token_pats))
        return cls.__TOKEN_PATTERN

    def __init__(self, text: str) -> None:
        self._text: str = text
        self.linenum: int = 1
        self.newline_anchor: int = -1
        self._scanned: int = 0

    def _position(self, offset: int) -> Position:
        self.linenum += self._text.count("\n", self._scanned, offset)
        self.newline_anchor = max(
            self.newline_anchor,
            self._text.rfind("\n", self._scanned, offset)
        )
        self._scanned = offset
        return Position(line=self.linenum, col=offset - self.newline_anchor)

    def _iter_tokens(self) -> Iterator[Token]:
        self.linenum = 1
        self.newline_anchor = -1
        self._scanned = 0

        for m in Lexer._token_pattern().finditer(self._text):
            name = m.lastgroup if m.lastgroup else ''
            yield Token(
                TokenType[name],
                m[name],
                self._position(m.start(name))
            )

        yield Token(TokenType.EOF, "", self._position(len(self._text)))

    def __iter__(self) -> Iterator[Token]:
        return self._iter_tokens()


def tokenize(text: str) -> List[Token]:
    tokens = list(Lexer(text))
    lexer_logger.info(f"Tokenized {len(tokens)} tokens")
    return tokens


class IAST(ABC, NodeMixin):
    def __init__(self, children: Optional[Sequence['IAST']] = None) -> None:
        self.children: Tuple['IAST', ...] = tuple(children or [])

    @property
    def kids(self) -> Tuple['IAST', ...]:
        assert isinstance(self.children, tuple)
        return self.children

    def accept(self, visitor: 'INodeVisitor') -> Any:
        return visitor.visit(self)

    @abstractmethod
    def __str__(self) -> str:
        return f"{type(self).__name__}({self.kids})"

    def __repr__(self) -> str:
        return str(self)


class Statement(IAST):
    pass


class Expression(IAST):
    pass


class Identifier(Expression):
    def __init__(self, name: str, token: Optional[Token] = None) -> None:
        super().__init__()
        self.name: str = name
        self.token: Optional[Token] = token

    def __str__(self) -> str:
        return f"{type(self).__name__}(name={self.name})"


class LiteralNumber(Expression):
    def __init__(self, value: int, token: Optional[Token] = None) -> None:
        super().__init__()
        self.value: int = value
        self.token: Optional[Token] = token

    def __str__(self) -> str:
        return f"{type(self).__name__}(value={self.value})"


class LiteralString(Expression):
    def __init__(self, value: str, token: Optional[Token] = None) -> None:
        super().__init__()
        self.value: str = value
        self.token: Optional[Token] = token

    def __str__(self) -> str:
        return f'{type(self).__name__}(value="{self.value}")'


class BinaryExpression(Expression):
    def __init__(
            self,
            left: Expression,
            op: str,
            right: Expression,
            token: Optional[Token] = None
    ) -> None:
        self.left: Expression = left
        self.op: str = op
        self.right: Expression = right
        self.token: Optional[Token] = token
        super().__init__([self.left, self.right])

    def __str__(self) -> str:
        return f"{type(self).__name__}(op={self.op})"


class UnaryExpression(Expression):
    def __init__(
            self,
            operand: Expression,
            op: str,
            token: Optional[Token] = None
    ) -> None:
        self.operand: Expression = operand
        self.op: str = op
        self.token: Optional[Token] = token
        super().__init__([self.operand])

    def __str__(self) -> str:
        return f"{type(self).__name__}(op={self.op})"


class Condition(IAST):
    def __init__(
            self,
            left: Expression,
            op: str,
            right: Expression,
            token: Optional[Token] = None
    ) -> None:
        self.left: Expression = left
        self.op: str = op
        self.right: Expression = right
        self.token: Optional[Token] = token
        super().__init__([self.left, self.right])

    def __str__(self) -> str:
        return f"{type(self).__name__}(op={self.op})"


class Block(IAST):
    def __init__(self, statements: Sequence[Statement]) -> None:
        self.statements: Tuple[Statement, ...] = tuple(statements)
        super().__init__(self.statements)

    def __str__(self) -> str:
        return f"{type(self).__name__}()"


class Assignment(Statement):
    def __init__(self, target: Identifier, value: Expression) -> None:
        self.target: Identifier = target
        self.value: Expression = value
        super().__init__([self.target, self.value])

    def __str__(self) -> str:
        return f"{type(self).__name__}(target={self.target.name})"


class IfStatement(Statement):
    def __init__(
            self,
            condition: Condition,
            then_block: Block,
            else_block: Optional[Block] = None
    ) -> None:
        self.condition: Condition = condition
        self.then_block: Block = then_block
        self.else_block: Optional[Block] = else_block
        kids: List[IAST] = [self.condition, self.then_block]
        if self.else_block is not None:
            kids.append(self.else_block)
        super().__init__(kids)

    def __str__(self) -> str:
        return f"{type(self).__name__}()"


class WhileStatement(Statement):
    def __init__(self, condition: Condition, block: Block) -> None:
        self.condition: Condition = condition
        self.block: Block = block
        super().__init__([self.condition, self.block])

    def __str__(self) -> str:
        return f"{type(self).__name__}()"


class PrintStatement(Statement):
    def __init__(self, expr: Expression) -> None:
        self.expr: Expression = expr
        super().__init__([self.expr])

    def __str__(self) -> str:
        return f"{type(self).__name__}()"


class ReadStatement(Statement):
    def __init__(
            self,
            prompt: Optional[LiteralString],
            target: Identifier
    ) -> None:
        self.prompt: Optional[LiteralString] = prompt
        self.target: Identifier = target
        kids: List[IAST] = [] if self.prompt is None else [self.prompt]
        super().__init__(kids + [self.target])

    def __str__(self) -> str:
        return f"{type(self).__name__}()"


class Parser:
    ARITHMETIC_OPS = ("+", "-", "*", "/")

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._it: Iterator[Token] = iter(tokens)
        self.current_token: Token = next(
            self._it, Token(TokenType.EOF, "", Position(line=1, col=1)))

    def _assert(
            self,
            cond,
            errcode: ErrorCode,
            token: Token,
            msg: Optional[Union[str, Callable[[], str]]] = None
    ) -> None:
        assert_with(
            cond,
            ParserError(
                error_code=errcode,
                token=token,
                appended_message=msg
            )
        )

    def advance(self) -> Token:
        if self.current_token.type != TokenType.EOF:
            self.current_token = next(
                self._it,
                Token(TokenType.EOF, "", self.current_token.pos)
            )
        return self.current_token

    def check(self, toktype: TokenType, value: Optional[str] = None) -> bool:
        curtok = self.current_token
        return curtok.type == toktype and \
            (value is None or curtok.value == value)

    def eat(self, toktype: TokenType, value: Optional[str] = None) -> Token:
        curtok = self.current_token

        def gen_msg() -> str:
            return f"Expected '{value}'" if value is not None \
                else f"Expected {toktype.name}"

        self._assert(
            cond=self.check(toktype, value),
            errcode=ErrorCode.UNEXPECTED_TOKEN,
            token=curtok,
            msg=gen_msg
        )

        self.advance()
        return curtok

    def primary(self) -> Expression:
        """
        primary :
            LPAR expr RPAR |
            NUMBER |
            STRINGLITERAL |
            IDENTIFIER
        """
        curtok = self.current_token

        node: Expression
        if self.check(TokenType.PUNCTUATION, "("):
            self.eat(TokenType.PUNCTUATION, "(")
            node = self.expr()
            self.eat(TokenType.PUNCTUATION, ")")
        elif curtok.type == TokenType.NUMBER:
            self.eat(TokenType.NUMBER)
            node = LiteralNumber(int(curtok.value), curtok)
        elif curtok.type == TokenType.STRINGLITERAL:
            self.eat(TokenType.STRINGLITERAL)
            node = LiteralString(curtok.value[1:-1], curtok)
        elif curtok.type == TokenType.IDENTIFIER:
            node = self.identifier()
        else:
            raise ParserError(
                error_code=ErrorCode.UNEXPECTED_TOKEN,
                token=curtok,
                appended_message="Expected expression"
            )
        return node

    def unary(self) -> Expression:
        """unary : SUB primary | primary"""
        curtok = self.current_token
        if self.check(TokenType.OPERATOR, "-"):
            self.eat(TokenType.OPERATOR, "-")
            return UnaryExpression(self.primary(), curtok.value, curtok)
        return self.primary()

    def expr(self) -> Expression:
        """expr : unary ((ADD | SUB | MUL | DIV) unary)*"""
        node: Expression = self.unary()

        while self.current_token.type == TokenType.OPERATOR and \
                self.current_token.value in Parser.ARITHMETIC_OPS:
            optok = self.eat(TokenType.OPERATOR)
            node = BinaryExpression(node, optok.value, self.unary(), optok)

        return node

    def condition(self) -> Condition:
        """condition : LPAR expr OPERATOR expr RPAR"""
        self.eat(TokenType.PUNCTUATION, "(")
        left = self.expr()
        optok = self.eat(TokenType.OPERATOR)
        right = self.expr()
        self.eat(TokenType.PUNCTUATION, ")")
        return Condition(left, optok.value, right, optok)

    def identifier(self) -> Identifier:
        """identifier : IDENTIFIER"""
        idtok = self.eat(TokenType.IDENTIFIER)
        return Identifier(idtok.value, idtok)

    def assignment_statement(self) -> Assignment:
        """assignment_statement : identifier ASSIGN expr SEMI"""
        target = self.identifier()
        self.eat(TokenType.OPERATOR, "=")
        value = self.expr()
        self.eat(TokenType.PUNCTUATION, ";")
        return Assignment(target, value)

    def if_statement(self) -> IfStatement:
        """if_statement : IF condition THEN block (ELSE block)?"""
        self.eat(TokenType.KEYWORD, "if")
        cond_node = self.condition()
        self.eat(TokenType.KEYWORD, "then")
        then_node = self.block()

        else_node = None
        if self.check(TokenType.KEYWORD, "else"):
            self.eat(TokenType.KEYWORD, "else")
            else_node = self.block()

        return IfStatement(cond_node, then_node, else_node)

    def while_statement(self) -> WhileStatement:
        """while_statement : WHILE condition block"""
        self.eat(TokenType.KEYWORD, "while")
        cond_node = self.condition()
        return WhileStatement(cond_node, self.block())

    def print_statement(self) -> PrintStatement:
        """print_statement : PRINT LPAR expr RPAR SEMI"""
        self.eat(TokenType.KEYWORD, "print")
        self.eat(TokenType.PUNCTUATION, "(")
        node = self.expr()
        self.eat(TokenType.PUNCTUATION, ")")
        self.eat(TokenType.PUNCTUATION, ";")
        return PrintStatement(node)

    def read_statement(self) -> ReadStatement:
        """read_statement : READ LPAR STRINGLITERAL? identifier RPAR SEMI"""
        self.eat(TokenType.KEYWORD, "read")
        self.eat(TokenType.PUNCTUATION, "(")

        prompt = None
        if self.current_token.type == TokenType.STRINGLITERAL:
            strtok = self.eat(TokenType.STRINGLITERAL)
            prompt = LiteralString(strtok.value[1:-1], strtok)

        target = self.identifier()
        self.eat(TokenType.PUNCTUATION, ")")
        self.eat(TokenType.PUNCTUATION, ";")
        return ReadStatement(prompt, target)

    def statement(self) -> Statement:
        """
        statement :
            if_statement |
            while_statement |
            print_statement |
            read_statement |
            assignment_statement
        """
        node: Statement
        if self.check(TokenType.KEYWORD, "if"):
            node = self.if_statement()
        elif self.check(TokenType.KEYWORD, "while"):
            node = self.while_statement()
        elif self.check(TokenType.KEYWORD, "print"):
            node = self.print_statement()
        elif self.check(TokenType.KEYWORD, "read"):
            node = self.read_statement()
        else:
            node = self.assignment_statement()
        return node

    def block(self) -> Block:
        """block : LBRACE statement* RBRACE"""
        self.eat(TokenType.PUNCTUATION, "{")

        statements: List[Statement] = []
        while not self.check(TokenType.PUNCTUATION, "}") and \
                self.current_token.type != TokenType.EOF:
            statements.append(self.statement())

        self.eat(TokenType.PUNCTUATION, "}")
        return Block(statements)

    def parse_expr(self) -> Expression:
        return self.expr()

    def parse_block(self) -> Block:
        return self.block()

    def parse(self) -> Block:
        """program : block EOF"""
        root = self.block()
        self.eat(TokenType.EOF)
        parser_logger.info(f"Parsed {len(root.statements)} top level statements")
        return root


def parse(tokens: Iterable[Token]) -> Block:
    return Parser(tokens).parse()


class INodeVisitor(ABC):
    def _gen_visit_method_name(self, node: IAST) -> str:
        method_name = '_visit_' + type(node).__name__
        return method_name.lower()

    def visit(self, node: IAST) -> Any:
        method_name = self._gen_visit_method_name(node)

        def raise_visit_error(_: IAST) -> None:
            assert False, f"No {method_name} method"

        return getattr(self, method_name, raise_visit_error)(node)

    @abstractmethod
    def _visit_block(self, node: Block) -> Any:
        pass

    @abstractmethod
    def _visit_assignment(self, node: Assignment) -> Any:
        pass

    @abstractmethod
    def _visit_ifstatement(self, node: IfStatement) -> Any:
        pass

    @abstractmethod
    def _visit_whilestatement(self, node: WhileStatement) -> Any:
        pass

    @abstractmethod
    def _visit_printstatement(self, node: PrintStatement) -> Any:
        pass

    @abstractmethod
    def _visit_readstatement(self, node: ReadStatement) -> Any:
        pass

    @abstractmethod
    def _visit_binaryexpression(self, node: BinaryExpression) -> Any:
        pass

    @abstractmethod
    def _visit_unaryexpression(self, node: UnaryExpression) -> Any:
        pass

    @abstractmethod
    def _visit_condition(self, node: Condition) -> Any:
        pass

    @abstractmethod
    def _visit_identifier(self, node: Identifier) -> Any:
        pass

    @abstractmethod
    def _visit_literalnumber(self, node: LiteralNumber) -> Any:
        pass

    @abstractmethod
    def _visit_literalstring(self, node: LiteralString) -> Any:
        pass


class CodePrinter(INodeVisitor):
    """Writes a node back out as source text.

    Binary expressions, unary expressions and conditions are always wrapped
    in parentheses, so the text parses back to the same tree whatever
    grouping the parsed text used.
    """
    INDENT = "  "

    def __init__(self, sink: Optional[TextIO] = None) -> None:
        self._sink: TextIO = sink if sink is not None else sys.stdout
        self._level: int = 0

    def _writeinl(self, s: str) -> None:
        self._sink.write(s)

    def _write(self, s: str) -> None:
        self._writeinl(f"{CodePrinter.INDENT * self._level}{s}")

    def _writeln(self, s: str) -> None:
        self._write(f"{s}\n")

    def _visit_nested(self, node: Block) -> None:
        self._level += 1
        self.visit(node)
        self._level -= 1

    def _visit_block(self, node: Block) -> None:
        self._writeln("{")
        self._level += 1
        for statement in node.statements:
            self.visit(statement)
        self._level -= 1
        self._writeln("}")

    def _visit_assignment(self, node: Assignment) -> None:
        self._write(f"{node.target.name} = ")
        self.visit(node.value)
        self._writeinl(";\n")

    def _visit_ifstatement(self, node: IfStatement) -> None:
        self._write("if ")
        self.visit(node.condition)
        self._writeinl(" then\n")
        self._visit_nested(node.then_block)
        if node.else_block is not None:
            self._writeln("else")
            self._visit_nested(node.else_block)

    def _visit_whilestatement(self, node: WhileStatement) -> None:
        self._write("while ")
        self.visit(node.condition)
        self._writeinl("\n")
        self._visit_nested(node.block)

    def _visit_printstatement(self, node: PrintStatement) -> None:
        self._write("print(")
        self.visit(node.expr)
        self._writeinl(");\n")

    def _visit_readstatement(self, node: ReadStatement) -> None:
        self._write("read(")
        if node.prompt is not None:
            self.visit(node.prompt)
            self._writeinl(" ")
        self.visit(node.target)
        self._writeinl(");\n")

    def _visit_binaryexpression(self, node: BinaryExpression) -> None:
        self._writeinl("(")
        self.visit(node.left)
        self._writeinl(f" {node.op} ")
        self.visit(node.right)
        self._writeinl(")")

    def _visit_unaryexpression(self, node: UnaryExpression) -> None:
        self._writeinl(f"({node.op}")
        self.visit(node.operand)
        self._writeinl(")")

    def _visit_condition(self, node: Condition) -> None:
        self._writeinl("(")
        self.visit(node.left)
        self._writeinl(f" {node.op} ")
        self.visit(node.right)
        self._writeinl(")")

    def _visit_identifier(self, node: Identifier) -> None:
        self._writeinl(node.name)

    def _visit_literalnumber(self, node: LiteralNumber) -> None:
        self._writeinl(str(node.value))

    def _visit_literalstring(self, node: LiteralString) -> None:
        self._writeinl(f'"{node.value}"')

    def write(self, node: IAST) -> None:
        self._level = 0
        self.visit(node)


def to_source(node: IAST) -> str:
    sbuf = io.StringIO()
    CodePrinter(sbuf).write(node)
    return sbuf.getvalue()


class TreeMaker(INodeVisitor):
    """Builds an anytree mirror of the AST for display.

    Every mirror node is labelled with the AST node's str() and keeps the
    AST node itself in its ``ast`` attribute.
    """
    EMPTY = "The tree is empty."

    def __init__(self) -> None:
        self._root: Optional[Node] = None
        self._parent: Optional[Node] = None

    @property
    def root(self) -> Optional[Node]:
        return self._root

    def _add(self, node: IAST, children: Sequence[Optional[IAST]]) -> None:
        tree_node = Node(str(node), parent=self._parent, ast=node)
        if self._root is None:
            self._root = tree_node

        parent = self._parent
        self._parent = tree_node
        for child in children:
            if child is not None:
                self.visit(child)
        self._parent = parent

    def _visit_block(self, node: Block) -> None:
        self._add(node, node.statements)

    def _visit_assignment(self, node: Assignment) -> None:
        self._add(node, [node.target, node.value])

    def _visit_ifstatement(self, node: IfStatement) -> None:
        self._add(node, [node.condition, node.then_block, node.else_block])

    def _visit_whilestatement(self, node: WhileStatement) -> None:
        self._add(node, [node.condition, node.block])

    def _visit_printstatement(self, node: PrintStatement) -> None:
        self._add(node, [node.expr])

    def _visit_readstatement(self, node: ReadStatement) -> None:
        self._add(node, [node.prompt, node.target])

    def _visit_binaryexpression(self, node: BinaryExpression) -> None:
        self._add(node, [node.left, node.right])

    def _visit_unaryexpression(self, node: UnaryExpression) -> None:
        self._add(node, [node.operand])

    def _visit_condition(self, node: Condition) -> None:
        self._add(node, [node.left, node.right])

    def _visit_identifier(self, node: Identifier) -> None:
        self._add(node, [])

    def _visit_literalnumber(self, node: LiteralNumber) -> None:
        self._add(node, [])

    def _visit_literalstring(self, node: LiteralString) -> None:
        self._add(node, [])

    def make(self, node: IAST) -> Node:
        self._root = None
        self._parent = None
        self.visit(node)
        return self._root

    def index(self) -> List[Tuple[IAST, Tuple[IAST, ...]]]:
        if self._root is None:
            return []
        return [
            (tree_node.ast, tuple(kid.ast for kid in tree_node.children))
            for tree_node in PreOrderIter(self._root)
            if tree_node.children
        ]

    def render(self) -> str:
        if self._root is None:
            return TreeMaker.EMPTY
        return "\n".join(
            f"{pre}{tree_node.name}"
            for pre, _, tree_node in RenderTree(self._root)
        )

    def print_tree(self, sink: Optional[TextIO] = None) -> None:
        print(self.render(), file=sink if sink is not None else sys.stdout)


class AssignmentInfo(NamedTuple):
    node: Assignment
    written: str
    read: FrozenSet[str]


class AssignmentCollector(INodeVisitor):
    """
    Collects every assignment reachable in the source, in source order.

    Both branches of an if and the body of a loop are walked whether or not
    they would run, so a name assigned in each branch shows up twice. The
    expression handlers return the names an expression reads.
    """

    def __init__(self) -> None:
        self._assignments: List[AssignmentInfo] = []

    @property
    def assignments(self) -> List[AssignmentInfo]:
        return list(self._assignments)

    def _visit_block(self, node: Block) -> None:
        for statement in node.statements:
            self.visit(statement)

    def _visit_assignment(self, node: Assignment) -> None:
        self._assignments.append(
            AssignmentInfo(
                node=node,
                written=node.target.name,
                read=self.visit(node.value)
            )
        )

    def _visit_ifstatement(self, node: IfStatement) -> None:
        self.visit(node.then_block)
        if node.else_block is not None:
            self.visit(node.else_block)

    def _visit_whilestatement(self, node: WhileStatement) -> None:
        self.visit(node.block)

    def _visit_printstatement(self, node: PrintStatement) -> None:
        pass

    def _visit_readstatement(self, node: ReadStatement) -> None:
        pass

    def _visit_binaryexpression(self, node: BinaryExpression) -> FrozenSet[str]:
        return self.visit(node.left) | self.visit(node.right)

    def _visit_unaryexpression(self, node: UnaryExpression) -> FrozenSet[str]:
        return self.visit(node.operand)

    def _visit_condition(self, node: Condition) -> FrozenSet[str]:
        return self.visit(node.left) | self.visit(node.right)

    def _visit_identifier(self, node: Identifier) -> FrozenSet[str]:
        return frozenset([node.name])

    def _visit_literalnumber(self, node: LiteralNumber) -> FrozenSet[str]:
        return frozenset()

    def _visit_literalstring(self, node: LiteralString) -> FrozenSet[str]:
        return frozenset()

    def collect(self, node: IAST) -> List[AssignmentInfo]:
        self._assignments = []
        self.visit(node)
        return self.assignments

    def report(self, sink: Optional[TextIO] = None) -> None:
        out = sink if sink is not None else sys.stdout
        for info in self._assignments:
            read = ", ".join(sorted(info.read))
            print(
                f"Assignment found: {info.written} = "
                f"{to_source(info.node.value)}",
                file=out
            )
            print(f"  Variable written: {info.written}", file=out)
            print(f"  Variable(s) read: [{read}]", file=out)


def truncdiv(left: int, right: int) -> int:
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


class Interpreter(INodeVisitor):
    BINARY_OPS: Dict[str, Callable[[int, int], int]] = {
        "+": operator.add,
        "-": operator.sub,
        "*": operator.mul,
        "/": truncdiv,
    }
    COMPARISONS: Dict[str, Callable[[int, int], bool]] = {
        "==": operator.eq,
        "!=": operator.ne,
        "<": operator.lt,
        "<=": operator.le,
        ">": operator.gt,
        ">=": operator.ge,
    }

    def __init__(
            self,
            stdin: Optional[TextIO] = None,
            stdout: Optional[TextIO] = None
    ) -> None:
        self._stdin: TextIO = stdin if stdin is not None else sys.stdin
        self._stdout: TextIO = stdout if stdout is not None else sys.stdout
        self.GLOBAL_SCOPE: Dict[str, Union[int, str]] = {}
        self._words: List[str] = []

    def _assert(
            self,
            cond,
            errcode: ErrorCode,
            token: Optional[Token],
            msg: Optional[Union[str, Callable[[], str]]] = None
    ) -> None:
        assert_with(
            cond,
            EvalError(
                error_code=errcode,
                token=token,
                appended_message=msg
            )
        )

    def _next_word(self, node: ReadStatement) -> str:
        while not self._words:
            line = self._stdin.readline()
            if not line:
                raise InputError(
                    error_code=ErrorCode.INPUT_EXHAUSTED,
                    token=node.target.token,
                    appended_message=f"No integer left to read into "
                                     f"{node.target.name}"
                )
            self._words = line.split()
        return self._words.pop(0)

    def _visit_block(self, node: Block) -> None:
        for statement in node.statements:
            self.visit(statement)

    def _visit_assignment(self, node: Assignment) -> None:
        name = node.target.name
        if isinstance(node.value, LiteralString):
            self.GLOBAL_SCOPE[name] = node.value.value
        else:
            self.GLOBAL_SCOPE[name] = cast(int, self.visit(node.value))

    def _visit_ifstatement(self, node: IfStatement) -> None:
        if self.visit(node.condition):
            self.visit(node.then_block)
        elif node.else_block is not None:
            self.visit(node.else_block)

    def _visit_whilestatement(self, node: WhileStatement) -> None:
        while self.visit(node.condition):
            self.visit(node.block)

    def _visit_printstatement(self, node: PrintStatement) -> None:
        expr = node.expr
        self._assert(
            cond=not isinstance(expr, (LiteralString, LiteralNumber)),
            errcode=ErrorCode.BAD_PRINT_TARGET,
            token=getattr(expr, "token", None),
            msg="Literals cannot be printed directly"
        )

        if isinstance(expr, Identifier):
            val = self.GLOBAL_SCOPE.get(expr.name)
            if isinstance(val, str):
                print(val, file=self._stdout)
                return

        print(cast(int, self.visit(expr)), file=self._stdout)

    def _visit_readstatement(self, node: ReadStatement) -> None:
        if node.prompt is not None:
            self._stdout.write(f"{node.prompt.value} ")
            self._stdout.flush()

        word = self._next_word(node)
        assert_with(
            re.fullmatch(r"[+-]?[0-9]+", word) is not None,
            InputError(
                error_code=ErrorCode.BAD_INPUT,
                token=node.target.token,
                appended_message=f"Got {word!r} for {node.target.name}"
            )
        )
        self.GLOBAL_SCOPE[node.target.name] = int(word)

    def _visit_binaryexpression(self, node: BinaryExpression) -> int:
        left = cast(int, self.visit(node.left))
        right = cast(int, self.visit(node.right))

        self._assert(
            cond=node.op in Interpreter.BINARY_OPS,
            errcode=ErrorCode.UNSUPPORTED_OPERATOR,
            token=node.token,
            msg=f"{node.op} is not a binary operator"
        )
        self._assert(
            cond=not (node.op == "/" and right == 0),
            errcode=ErrorCode.DIVISION_BY_ZERO,
            token=node.token,
            msg=lambda: f"{left} / {right}"
        )

        return Interpreter.BINARY_OPS[node.op](left, right)

    def _visit_unaryexpression(self, node: UnaryExpression) -> int:
        value = cast(int, self.visit(node.operand))
        self._assert(
            cond=node.op == "-",
            errcode=ErrorCode.UNSUPPORTED_OPERATOR,
            token=node.token,
            msg=f"{node.op} is not a unary operator"
        )
        return -value

    def _visit_condition(self, node: Condition) -> bool:
        left = cast(int, self.visit(node.left))
        right = cast(int, self.visit(node.right))

        self._assert(
            cond=node.op in Interpreter.COMPARISONS,
            errcode=ErrorCode.UNSUPPORTED_OPERATOR,
            token=node.token,
            msg=f"{node.op} is not a comparison operator"
        )

        return Interpreter.COMPARISONS[node.op](left, right)

    def _visit_identifier(self, node: Identifier) -> int:
        name = node.name
        val = self.GLOBAL_SCOPE.get(name)

        def gen_msg() -> str:
            return f"{name} is not defined" if val is None \
                else f"{name} holds a string, not an integer"

        self._assert(
            cond=isinstance(val, int),
            errcode=ErrorCode.UNDEFINED_VARIABLE,
            token=node.token,
            msg=gen_msg
        )
        return cast(int, val)

    def _visit_literalnumber(self, node: LiteralNumber) -> int:
        return node.value

    def _visit_literalstring(self, node: LiteralString) -> int:
        raise EvalError(
            error_code=ErrorCode.UNSUPPORTED_OPERAND,
            token=node.token,
            appended_message=f'"{node.value}" is not an integer'
        )

    def interpret(self, ast: IAST) -> Dict[str, Union[int, str]]:
        self.GLOBAL_SCOPE = {}
        self._words = []

        runtime_logger.info("ENTER: run")
        self.visit(ast)
        runtime_logger.info("LEAVE: run")
        runtime_logger.info(f"global runtime memory: {self.GLOBAL_SCOPE}")

        memory, self.GLOBAL_SCOPE = self.GLOBAL_SCOPE, {}
        return memory


def class_name_for(path: str) -> str:
    stem = os.path.splitext(os.path.basename(path))[0]
    return f"Gen{to_camel_case(stem)}"


def java_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\") \
        .replace("\n", "\\n") \
        .replace("\r", "\\r") \
        .replace("\t", "\\t")
    return f'"{escaped}"'


class CodeGenerator(INodeVisitor):
    """
    Translates a program into a Java class with a single main method.

    Every assigned name is declared up front: String if some assignment
    gives it a string literal, int otherwise. Expression handlers return
    their Java text; statement handlers append lines.
    """
    PACKAGE_NAME = "minilang.generated"
    INDENT = " " * 4

    def __init__(self, class_name: str) -> None:
        self.class_name: str = class_name
        self._lines: List[str] = []
        self._level: int = 2

    def _writeln(self, s: str) -> None:
        self._lines.append(f"{CodeGenerator.INDENT * self._level}{s}")

    def _visit_nested(self, node: Block) -> None:
        self._level += 1
        self.visit(node)
        self._level -= 1

    def _visit_block(self, node: Block) -> None:
        for statement in node.statements:
            self.visit(statement)

    def _visit_assignment(self, node: Assignment) -> None:
        self._writeln(f"{node.target.name} = {self.visit(node.value)};")

    def _visit_ifstatement(self, node: IfStatement) -> None:
        self._writeln(f"if {self.visit(node.condition)} {{")
        self._visit_nested(node.then_block)
        self._writeln("}")
        if node.else_block is not None:
            self._writeln("else {")
            self._visit_nested(node.else_block)
            self._writeln("}")

    def _visit_whilestatement(self, node: WhileStatement) -> None:
        self._writeln(f"while {self.visit(node.condition)} {{")
        self._visit_nested(node.block)
        self._writeln("}")

    def _visit_printstatement(self, node: PrintStatement) -> None:
        self._writeln(f"System.out.println({self.visit(node.expr)});")

    def _visit_readstatement(self, node: ReadStatement) -> None:
        raise GenError(
            error_code=ErrorCode.UNSUPPORTED_NODE,
            token=node.target.token,
            appended_message="Reading input has no generated equivalent"
        )

    def _visit_binaryexpression(self, node: BinaryExpression) -> str:
        return f"({self.visit(node.left)} {node.op} {self.visit(node.right)})"

    def _visit_unaryexpression(self, node: UnaryExpression) -> str:
        return f"({node.op}{self.visit(node.operand)})"

    def _visit_condition(self, node: Condition) -> str:
        return f"({self.visit(node.left)} {node.op} {self.visit(node.right)})"

    def _visit_identifier(self, node: Identifier) -> str:
        return node.name

    def _visit_literalnumber(self, node: LiteralNumber) -> str:
        return str(node.value)

    def _visit_literalstring(self, node: LiteralString) -> str:
        return java_string(node.value)

    def _declarations(self, assignments: List[AssignmentInfo]) -> List[str]:
        kinds: Dict[str, str] = {}
        for info in assignments:
            is_string = isinstance(info.node.value, LiteralString)
            if is_string or info.written not in kinds:
                kinds[info.written] = "String" if is_string else "int"
        codegen_logger.info(f"Declarations: {kinds}")
        return [f"{kind} {name};" for name, kind in kinds.items()]

    def generate(self, ast: Block) -> str:
        assignments = AssignmentCollector().collect(ast)

        self._lines = [
            f"package {CodeGenerator.PACKAGE_NAME};",
            "",
            f"public class {self.class_name} {{",
            f"{CodeGenerator.INDENT}public static void main(String[] args) {{",
        ]
        self._level = 2
        for declaration in self._declarations(assignments):
            self._writeln(declaration)

        self.visit(ast)

        self._lines += [f"{CodeGenerator.INDENT}}}", "}"]
        codegen_logger.info(f"Generated class {self.class_name}")
        return "\n".join(self._lines) + "\n"


def run_file(path: str, args: argparse.Namespace) -> None:
    with open(path) as src_file:
        text = src_file.read()

    tokens: List[Token] = tokenize(text)
    if args.tokens:
        for token in tokens:
            print(repr(token))

    ast: Block = parse(tokens)

    if args.pretty:
        CodePrinter().write(ast)

    if args.tree:
        tree_maker = TreeMaker()
        tree_maker.make(ast)
        tree_maker.print_tree()

    if not args.no_run:
        Interpreter().interpret(ast)

    if args.gen_dir is not None:
        class_name = class_name_for(path)
        java_src = CodeGenerator(class_name).generate(ast)
        os.makedirs(args.gen_dir, exist_ok=True)
        out_path = os.path.join(args.gen_dir, f"{class_name}.java")
        with open(out_path, "w") as java_file:
            java_file.write(java_src)
        codegen_logger.info(f"Wrote {out_path}")

    if args.assignments:
        collector = AssignmentCollector()
        collector.collect(ast)
        collector.report()


def main(argv: Optional[Sequence[str]] = None) -> int:
    argparser = argparse.ArgumentParser(
        description="mini-language interpreter and translator")
    argparser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="verbose debugging output"
    )
    argparser.add_argument(
        "-t", "--tokens",
        action="store_true",
        help="print the tokens of each FILE"
    )
    argparser.add_argument(
        "-p", "--pretty",
        action="store_true",
        help="print the formatted source of each FILE"
    )
    argparser.add_argument(
        "-r", "--tree",
        action="store_true",
        help="print the syntax tree of each FILE"
    )
    argparser.add_argument(
        "-a", "--assignments",
        action="store_true",
        help="print the assignments found in each FILE"
    )
    argparser.add_argument(
        "-g", "--gen-dir",
        metavar="DIR",
        help="translate each FILE to a Java class written to DIR"
    )
    argparser.add_argument(
        "--no-run",
        action="store_true",
        help="do not execute FILE"
    )
    argparser.add_argument("FILE", nargs="+", help="mini-language source file")
    args = argparser.parse_args(argv)

    setup_logging(args.verbose)

    failed = False
    for path in args.FILE:
        if len(args.FILE) > 1:
            print(f"===> {path} <===")
        try:
            run_file(path, args)
        except (Error, OSError) as e:
            print(f"{path}: {e}", file=sys.stderr)
            failed = True

    return 1 if failed else 0


logging.disable(logging.CRITICAL)
if __name__ == '__main__':
    sys.exit(main())

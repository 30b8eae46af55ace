"""Parser for the routing expression DSL.

Turns the token stream into an immutable AST of frozen dataclasses.
One recursive-descent method per precedence level.

Operator Precedence (lowest to highest):
1. ||
2. &&
3. == !=
4. < <= > >=
5. + -
6. * /
7. ! (not) - (unary)
8. literals, variables, calls, ( ... )

All binary operators are left-associative. `if(cond, a, b)` parses as an
ordinary Call; its lazy semantics live in the evaluator.

Nesting is bounded: more than MAX_NESTING open groups, unary operators or
call argument lists, or a tree taller than MAX_DEPTH, is a ParseError. Both
the parser and the evaluator recurse over the tree.
"""

from dataclasses import dataclass, field
from typing import Any

from tdlr.routing.expressions.errors import ExpressionError
from tdlr.routing.expressions.lexer import Lexer, Token, TokenType


# -----------------------------------------------------------------------------
# AST Node Types
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class ASTNode:
    """Base class for AST nodes."""
    pass


@dataclass(frozen=True)
class Literal(ASTNode):
    """A literal value (number, string, boolean)."""
    value: Any
    position: int = field(default=0, compare=False)


@dataclass(frozen=True)
class Variable(ASTNode):
    """A context variable reference."""
    name: str
    position: int = field(default=0, compare=False)


@dataclass(frozen=True)
class BinaryOp(ASTNode):
    """Binary operation (e.g., a + b, x == y)."""
    operator: str
    left: ASTNode
    right: ASTNode
    position: int = field(default=0, compare=False)


@dataclass(frozen=True)
class UnaryOp(ASTNode):
    """Unary operation (e.g., !x, -y)."""
    operator: str
    operand: ASTNode
    position: int = field(default=0, compare=False)


@dataclass(frozen=True)
class Call(ASTNode):
    """Function call (e.g., str::len(name), if(c, a, b))."""
    name: str
    arguments: tuple[ASTNode, ...]
    position: int = field(default=0, compare=False)


def walk(node: ASTNode):
    """Yield every node of the tree, depth first, parents before children."""
    yield node
    if isinstance(node, BinaryOp):
        yield from walk(node.left)
        yield from walk(node.right)
    elif isinstance(node, UnaryOp):
        yield from walk(node.operand)
    elif isinstance(node, Call):
        for argument in node.arguments:
            yield from walk(argument)


# -----------------------------------------------------------------------------
# Parser
# -----------------------------------------------------------------------------


class ParseError(ExpressionError):
    """Error during parsing.

    Attributes:
        token: The offending token
        expected: What the parser wanted at this point
        found: Description of the token it got instead
    """

    def __init__(self, message: str, token: Token, expected: str | None = None):
        self.token = token
        self.expected = expected
        self.found = token.describe()
        super().__init__(message, token.position)


_EQUALITY_OPS = {
    TokenType.EQ: "==",
    TokenType.NEQ: "!=",
}

_RELATIONAL_OPS = {
    TokenType.LT: "<",
    TokenType.LTE: "<=",
    TokenType.GT: ">",
    TokenType.GTE: ">=",
}

_ADDITIVE_OPS = {
    TokenType.PLUS: "+",
    TokenType.MINUS: "-",
}

_MULTIPLICATIVE_OPS = {
    TokenType.MULTIPLY: "*",
    TokenType.DIVIDE: "/",
}

MAX_NESTING = 40

MAX_DEPTH = 200


class Parser:
    """Recursive descent parser for the expression DSL.

    Usage:
        parser = Parser('if(size > 100 * MB, "@large", "@small")')
        ast = parser.parse()
    """

    def __init__(self, source: str):
        self.source = source
        self.lexer = Lexer(source)
        self.tokens = self.lexer.tokenize()
        self.position = 0
        self.nesting = 0

    def parse(self) -> ASTNode:
        """Parse the whole source as one expression and return the AST root."""
        if not self.tokens or self.tokens[0].type == TokenType.EOF:
            raise ParseError(
                "Empty expression",
                Token(TokenType.EOF, None, 0),
                expected="expression",
            )

        ast = self._parse_or()

        if not self._is_at_end():
            current = self._current()
            raise ParseError(
                f"Expected end of input but found {current.describe()}",
                current,
                expected="end of input",
            )

        self._check_depth(ast)
        return ast

    # -------------------------------------------------------------------------
    # Helper methods
    # -------------------------------------------------------------------------

    def _current(self) -> Token:
        if self.position >= len(self.tokens):
            return Token(TokenType.EOF, None, len(self.source))
        return self.tokens[self.position]

    def _is_at_end(self) -> bool:
        return self._current().type == TokenType.EOF

    def _advance(self) -> Token:
        """Return the current token and move past it."""
        token = self._current()
        self.position += 1
        return token

    def _match(self, *types: TokenType) -> bool:
        """True if the current token is one of `types`; consumes nothing."""
        return self._current().type in types

    def _consume(self, token_type: TokenType, expected: str) -> Token:
        """Consume a token of `token_type`, or raise ParseError naming `expected`."""
        if self._current().type == token_type:
            return self._advance()
        current = self._current()
        raise ParseError(
            f"Expected {expected} but found {current.describe()}",
            current,
            expected=expected,
        )

    def _check_depth(self, root: ASTNode) -> None:
        """Reject trees taller than MAX_DEPTH, such as long operator chains."""
        pending = [(root, 1)]
        while pending:
            node, depth = pending.pop()
            if depth > MAX_DEPTH:
                token = next(
                    (t for t in self.tokens if t.position == node.position),
                    self.tokens[0],
                )
                raise ParseError(
                    "Expression nested too deeply", token, expected="a shorter expression"
                )
            if isinstance(node, BinaryOp):
                pending.append((node.left, depth + 1))
                pending.append((node.right, depth + 1))
            elif isinstance(node, UnaryOp):
                pending.append((node.operand, depth + 1))
            elif isinstance(node, Call):
                pending.extend((argument, depth + 1) for argument in node.arguments)

    def _parse_binary(self, operators: dict[TokenType, str], operand) -> ASTNode:
        """Parse one left-associative precedence level."""
        left = operand()

        while self._current().type in operators:
            op_token = self._advance()
            right = operand()
            left = BinaryOp(
                operators[op_token.type], left, right, position=op_token.position
            )

        return left

    # -------------------------------------------------------------------------
    # Parsing methods (in order of precedence, lowest to highest)
    # -------------------------------------------------------------------------

    def _parse_or(self) -> ASTNode:
        """Lowest precedence: a || b."""
        return self._parse_binary({TokenType.OR: "||"}, self._parse_and)

    def _parse_and(self) -> ASTNode:
        return self._parse_binary({TokenType.AND: "&&"}, self._parse_equality)

    def _parse_equality(self) -> ASTNode:
        return self._parse_binary(_EQUALITY_OPS, self._parse_relational)

    def _parse_relational(self) -> ASTNode:
        return self._parse_binary(_RELATIONAL_OPS, self._parse_additive)

    def _parse_additive(self) -> ASTNode:
        return self._parse_binary(_ADDITIVE_OPS, self._parse_multiplicative)

    def _parse_multiplicative(self) -> ASTNode:
        return self._parse_binary(_MULTIPLICATIVE_OPS, self._parse_unary)

    def _parse_unary(self) -> ASTNode:
        """Parse unary expression (!, -)."""
        if self.nesting >= MAX_NESTING:
            raise ParseError(
                "Expression nested too deeply", self._current(), expected="expression"
            )

        self.nesting += 1
        try:
            return self._parse_unary_operand()
        finally:
            self.nesting -= 1

    def _parse_unary_operand(self) -> ASTNode:
        if self._match(TokenType.NOT):
            op_token = self._advance()
            operand = self._parse_unary()
            return UnaryOp("!", operand, position=op_token.position)

        if self._match(TokenType.MINUS):
            op_token = self._advance()
            operand = self._parse_unary()
            return UnaryOp("-", operand, position=op_token.position)

        return self._parse_primary()

    def _parse_primary(self) -> ASTNode:
        """Parse primary expression (literals, variables, calls, grouped expressions)."""
        token = self._current()

        # Literals
        if token.type in (TokenType.NUMBER, TokenType.STRING, TokenType.BOOLEAN):
            self._advance()
            return Literal(token.value, position=token.position)

        # Variable reference or function call
        if token.type == TokenType.IDENTIFIER:
            self._advance()
            if self._match(TokenType.LPAREN):
                return self._parse_call(token)
            return Variable(str(token.value), position=token.position)

        # Grouped expression
        if token.type == TokenType.LPAREN:
            self._advance()
            expr = self._parse_or()
            self._consume(TokenType.RPAREN, "')'")
            return expr

        raise ParseError(
            f"Expected expression but found {token.describe()}",
            token,
            expected="expression",
        )

    def _parse_call(self, name_token: Token) -> Call:
        """Parse the parenthesized argument list after a function name."""
        self._consume(TokenType.LPAREN, "'('")

        arguments: list[ASTNode] = []

        if not self._match(TokenType.RPAREN):
            arguments.append(self._parse_or())

            while self._match(TokenType.COMMA):
                self._advance()
                arguments.append(self._parse_or())

        if not self._match(TokenType.RPAREN):
            current = self._current()
            raise ParseError(
                f"Expected ',' or ')' but found {current.describe()}",
                current,
                expected="',' or ')'",
            )
        self._advance()

        return Call(str(name_token.value), tuple(arguments), position=name_token.position)


def parse(source: str) -> ASTNode:
    """Convenience function to parse an expression string.

    Args:
        source: The expression string

    Returns:
        The AST root node

    Raises:
        LexError: If the source contains an unrecognized character
        ParseError: If the token stream is not a single well-formed expression
    """
    return Parser(source).parse()

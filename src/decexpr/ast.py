"""
Abstract Syntax Tree (AST) node types for the expression language.

The AST is produced by the parser and consumed by the evaluator. Nodes are
immutable; evaluating a tree never changes it.
"""

from abc import ABC
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Literal, Sequence, Tuple, Union

# ============================================================
# Operator Types
# ============================================================

UnaryOperator = Literal["-"]

LogicalOperator = Literal["||", "&&"]

BinaryOperator = Literal[
    "+",
    "-",
    "*",
    "/",
    "%",
    "^",
    "==",
    "!=",
    ">",
    ">=",
    "<",
    "<=",
]


# ============================================================
# AST Node Types
# ============================================================


@dataclass(frozen=True)
class AstNodeBase(ABC):
    """Base class for all AST nodes."""

    position: int
    """Position in source expression (for error reporting)."""


@dataclass(frozen=True)
class NumberLiteralNode(AstNodeBase):
    """Number literal node."""

    value: Decimal

    @property
    def type(self) -> Literal["NumberLiteral"]:
        return "NumberLiteral"


@dataclass(frozen=True)
class VariableNode(AstNodeBase):
    """Variable reference node."""

    name: str

    @property
    def type(self) -> Literal["Variable"]:
        return "Variable"


@dataclass(frozen=True)
class GroupingNode(AstNodeBase):
    """Parenthesized expression node."""

    expression: "AstNode"

    @property
    def type(self) -> Literal["Grouping"]:
        return "Grouping"


@dataclass(frozen=True)
class AssignNode(AstNodeBase):
    """Assignment node (name = value)."""

    name: str
    value: "AstNode"

    @property
    def type(self) -> Literal["Assign"]:
        return "Assign"


@dataclass(frozen=True)
class FunctionCallNode(AstNodeBase):
    """Function call node."""

    name: str
    args: Sequence["AstNode"]

    @property
    def type(self) -> Literal["FunctionCall"]:
        return "FunctionCall"


@dataclass(frozen=True)
class UnaryOpNode(AstNodeBase):
    """Unary operator node."""

    operator: UnaryOperator
    operand: "AstNode"

    @property
    def type(self) -> Literal["UnaryOp"]:
        return "UnaryOp"


@dataclass(frozen=True)
class BinaryOpNode(AstNodeBase):
    """Binary operator node (both operands always evaluated)."""

    operator: BinaryOperator
    left: "AstNode"
    right: "AstNode"

    @property
    def type(self) -> Literal["BinaryOp"]:
        return "BinaryOp"


@dataclass(frozen=True)
class LogicalOpNode(AstNodeBase):
    """Short-circuiting logical operator node."""

    operator: LogicalOperator
    left: "AstNode"
    right: "AstNode"

    @property
    def type(self) -> Literal["LogicalOp"]:
        return "LogicalOp"


# Union type for all AST nodes
AstNode = Union[
    NumberLiteralNode,
    VariableNode,
    GroupingNode,
    AssignNode,
    FunctionCallNode,
    UnaryOpNode,
    BinaryOpNode,
    LogicalOpNode,
]


# ============================================================
# AST Utilities
# ============================================================


def _children(node: AstNode) -> Sequence[AstNode]:
    """Returns the direct child nodes in evaluation order."""
    if isinstance(node, GroupingNode):
        return (node.expression,)
    if isinstance(node, AssignNode):
        return (node.value,)
    if isinstance(node, FunctionCallNode):
        return tuple(node.args)
    if isinstance(node, UnaryOpNode):
        return (node.operand,)
    if isinstance(node, BinaryOpNode | LogicalOpNode):
        return (node.left, node.right)
    return ()


def count_ast_nodes(node: AstNode) -> int:
    """Counts the total number of nodes in an AST."""
    count = 0
    pending: List[AstNode] = [node]
    while pending:
        current = pending.pop()
        count += 1
        pending.extend(_children(current))
    return count


def calculate_ast_depth(node: AstNode) -> int:
    """
    Calculates the maximum depth of an AST.

    Walks iteratively: left-folded operator chains can be deeper than the
    interpreter recursion limit.
    """
    depth = 0
    pending: List[Tuple[AstNode, int]] = [(node, 1)]
    while pending:
        current, level = pending.pop()
        depth = max(depth, level)
        pending.extend((child, level + 1) for child in _children(current))
    return depth


def ast_to_string(node: AstNode, indent: int = 0) -> str:
    """Returns a human-readable representation of an AST node for debugging."""
    prefix = "  " * indent

    if node.type == "NumberLiteral":
        return f"{prefix}Number: {node.value}"

    if node.type == "Variable":
        return f"{prefix}Variable: {node.name}"

    if node.type == "Grouping":
        return f"{prefix}Grouping:\n{ast_to_string(node.expression, indent + 1)}"

    if node.type == "Assign":
        return f"{prefix}Assign: {node.name}\n{ast_to_string(node.value, indent + 1)}"

    if node.type == "FunctionCall":
        args_str = "".join(f"\n{ast_to_string(a, indent + 1)}" for a in node.args)
        return f"{prefix}FunctionCall: {node.name}{args_str}"

    if node.type == "UnaryOp":
        operand_str = ast_to_string(node.operand, indent + 1)
        return f"{prefix}UnaryOp: {node.operator}\n{operand_str}"

    if node.type in ("BinaryOp", "LogicalOp"):
        return (
            f"{prefix}{node.type}: {node.operator}\n"
            f"{ast_to_string(node.left, indent + 1)}\n"
            f"{ast_to_string(node.right, indent + 1)}"
        )

    return f"{prefix}Unknown: {node}"

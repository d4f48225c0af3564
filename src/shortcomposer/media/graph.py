"""Typed FFmpeg filter graph: node records serialized only at the boundary."""

import re
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, Field

from ..core.errors import GraphAssemblyError

# Raw input stream reference such as "0:v" or "3:a"
RAW_STREAM = re.compile(r"^(\d+):([va])$")

# Characters that must be protected by quoting inside a filter option
_QUOTE_CHARS = set(",:;[]'\\ ()")


def fmt_number(value: float) -> str:
    """Format a number for FFmpeg without float noise (5.0 -> "5", 0.1 -> "0.1")."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return text if text not in ("", "-0") else "0"


def _fmt_value(value: Any) -> str:
    if isinstance(value, (int, float)):
        return fmt_number(value)
    text = str(value)
    if any(c in _QUOTE_CHARS for c in text):
        return "'" + text.replace("'", "'\\''") + "'"
    return text


class Filter(BaseModel):
    """One filter step, e.g. scale=1080:1920:force_original_aspect_ratio=increase."""

    name: str
    args: List[Any] = Field(default_factory=list)
    options: Dict[str, Any] = Field(default_factory=dict)

    def render(self) -> str:
        parts = [_fmt_value(a) for a in self.args]
        parts.extend(f"{k}={_fmt_value(v)}" for k, v in self.options.items())
        if not parts:
            return self.name
        return f"{self.name}=" + ":".join(parts)


class FilterNode(BaseModel):
    """A filter chain with labeled inputs and exactly one labeled output."""

    inputs: List[str]
    filters: List[Filter]
    output: str

    def render(self) -> str:
        ins = "".join(f"[{label}]" for label in self.inputs)
        chain = ",".join(f.render() for f in self.filters)
        return f"{ins}{chain}[{self.output}]"


class FilterGraph:
    """Ordered collection of filter nodes over a fixed number of raw inputs."""

    def __init__(self, input_count: int):
        self.input_count = input_count
        self.nodes: List[FilterNode] = []

    def add(self, node: FilterNode) -> str:
        """Append a node and return its output label."""
        self.nodes.append(node)
        return node.output

    def extend(self, nodes: List[FilterNode]) -> None:
        for node in nodes:
            self.add(node)

    @property
    def labels(self) -> List[str]:
        return [n.output for n in self.nodes]

    def validate(self, terminal: Optional[str] = None) -> str:
        """
        Check labeling and dependency order.

        Args:
            terminal: Expected final output label, if known

        Returns:
            The single terminal (unconsumed) label

        Raises:
            GraphAssemblyError: On dangling, forward, duplicate or out-of-range
                references, or when the graph has no single terminal stream
        """
        if not self.nodes:
            raise GraphAssemblyError("Filter graph is empty")

        produced: Set[str] = set()
        consumed: Set[str] = set()
        for node in self.nodes:
            if not node.filters:
                raise GraphAssemblyError(f"Node [{node.output}] has no filters")
            for label in node.inputs:
                raw = RAW_STREAM.match(label)
                if raw:
                    if int(raw.group(1)) >= self.input_count:
                        raise GraphAssemblyError(
                            f"Stream [{label}] refers to a missing input "
                            f"({self.input_count} inputs)"
                        )
                    continue
                if label not in produced:
                    raise GraphAssemblyError(
                        f"Label [{label}] is consumed before it is produced"
                    )
                if label in consumed:
                    raise GraphAssemblyError(f"Label [{label}] is consumed twice")
                consumed.add(label)
            if RAW_STREAM.match(node.output) or node.output in produced:
                raise GraphAssemblyError(f"Label [{node.output}] is produced twice")
            produced.add(node.output)

        terminals = [label for label in self.labels if label not in consumed]
        if len(terminals) != 1:
            raise GraphAssemblyError(
                f"Filter graph must end in exactly one stream, found {terminals}"
            )
        if terminal is not None and terminals[0] != terminal:
            raise GraphAssemblyError(
                f"Filter graph ends in [{terminals[0]}], expected [{terminal}]"
            )
        return terminals[0]

    def serialize(self) -> str:
        """Render the graph in FFmpeg -filter_complex syntax."""
        return ";".join(node.render() for node in self.nodes)

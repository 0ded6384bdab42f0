"""라인 기반 필드 파서와 경계 판정."""
from formula_miner.parser.fields import (
    Field,
    MultiLineField,
    ParserState,
    SameLineMultiField,
    SingleLineField,
    finish,
    parse_lines,
    step,
)

__all__ = [
    "Field",
    "MultiLineField",
    "ParserState",
    "SameLineMultiField",
    "SingleLineField",
    "finish",
    "parse_lines",
    "step",
]

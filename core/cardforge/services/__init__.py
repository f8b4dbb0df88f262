"""Graph construction services for CardForge."""

from .wiring import (
    ConnectionDirectionMismatch,
    ConnectionKindMismatch,
    ConnectionRejected,
    EdgeKindMismatch,
    LinkResult,
    UnknownPort,
    add_link,
    remove_link,
    validate_graph,
)

__all__ = [
	"ConnectionDirectionMismatch",
	"ConnectionKindMismatch",
	"ConnectionRejected",
	"EdgeKindMismatch",
	"LinkResult",
	"UnknownPort",
	"add_link",
	"remove_link",
	"validate_graph",
]

"""Joining processed clip streams with concat or chained cross-fades."""

from typing import List, Optional, Tuple

from ..core.errors import GraphAssemblyError
from .graph import Filter, FilterNode
from .timeline import Timeline

FINAL_LABEL = "vout"


def _concat(labels: List[str], output: str) -> FilterNode:
    return FilterNode(
        inputs=list(labels),
        filters=[Filter(name="concat", options={"n": len(labels), "v": 1, "a": 0})],
        output=output,
    )


def _xfade(first: str, second: str, timeline: Timeline, offset: float, output: str) -> FilterNode:
    return FilterNode(
        inputs=[first, second],
        filters=[
            Filter(
                name="xfade",
                options={
                    "transition": timeline.transition.value,
                    "duration": timeline.overlap,
                    "offset": offset,
                },
            )
        ],
        output=output,
    )


def compose_transitions(
    clip_labels: List[str],
    timeline: Timeline,
    outro_label: Optional[str] = None,
) -> Tuple[List[FilterNode], str]:
    """
    Join clip streams (and the outro) into one final visual stream.

    Args:
        clip_labels: Per-clip output labels, in timeline order
        timeline: Resolved timeline (durations, transition, overlap)
        outro_label: Label of the processed outro stream, if any

    Returns:
        Tuple of (nodes in dependency order, final label)
    """
    if not clip_labels:
        raise GraphAssemblyError("No clip streams to join")
    if len(clip_labels) != len(timeline.entries):
        raise GraphAssemblyError(
            f"{len(clip_labels)} clip streams for {len(timeline.entries)} timeline entries"
        )
    if (outro_label is None) != (timeline.outro is None):
        raise GraphAssemblyError("Outro stream and outro timing disagree")

    if timeline.overlap <= 0:
        labels = list(clip_labels)
        if outro_label is not None:
            labels.append(outro_label)
        return [_concat(labels, FINAL_LABEL)], FINAL_LABEL

    nodes: List[FilterNode] = []
    offsets = timeline.crossfade_offsets()
    current = clip_labels[0]
    last_join = len(clip_labels) - 1

    for i, (label, offset) in enumerate(zip(clip_labels[1:], offsets), start=1):
        ends_chain = i == last_join and outro_label is None
        output = FINAL_LABEL if ends_chain else f"xf{i}"
        nodes.append(_xfade(current, label, timeline, offset, output))
        current = output

    if outro_label is not None:
        nodes.append(
            _xfade(current, outro_label, timeline, timeline.outro_offset(), FINAL_LABEL)
        )
    elif not nodes:
        # Single clip with a transition configured: nothing to fade into
        nodes.append(
            FilterNode(inputs=[current], filters=[Filter(name="null")], output=FINAL_LABEL)
        )

    return nodes, FINAL_LABEL

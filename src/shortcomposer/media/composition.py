"""Filter graph assembly and FFmpeg command construction for each output kind."""

from typing import List, Optional, Sequence

from ..core.errors import GraphAssemblyError
from ..core.types import MediaKind
from .context import MediaContext, default_context
from .effects import clip_node, outro_node
from .encoders import EncoderProfile
from .graph import Filter, FilterGraph, FilterNode, fmt_number
from .runner import run_ffmpeg_async
from .settings import CompositionSettings
from .timeline import ClipSource, Timeline, TimelineEntry
from .transitions import compose_transitions

AUDIO_LABEL = "aout"


class Assembly:
    """Shared command handling for everything that renders through FFmpeg."""

    def __init__(self, encoder: EncoderProfile, ctx: Optional[MediaContext] = None):
        self.ctx = ctx or default_context()
        self.encoder = encoder

    def build_graph(self) -> FilterGraph:
        raise NotImplementedError

    def _input_args(self) -> List[str]:
        raise NotImplementedError

    def _output_args(self, terminal: str) -> List[str]:
        raise NotImplementedError

    def _build_ffmpeg_argv(self, out_path: str) -> List[str]:
        """Build complete FFmpeg argument list."""
        graph = self.build_graph()
        terminal = graph.validate()

        argv = [self.ctx.ffmpeg, "-y", "-hide_banner"]
        argv.extend(self._input_args())
        argv.extend(["-filter_complex", graph.serialize()])
        argv.extend(self._output_args(terminal))
        argv.extend(self.encoder.args(out_path))
        return argv

    def dry_run(self, out_path: str = "OUT") -> str:
        """
        Generate FFmpeg command without executing.

        Returns:
            FFmpeg command string
        """
        argv = self._build_ffmpeg_argv(out_path + self.encoder.suffix)
        return " ".join(map(str, argv))

    async def to_file(self, out_path: str) -> None:
        """
        Render to a file, time-boxed by the context's render timeout.

        Args:
            out_path: Output file path

        Raises:
            GraphAssemblyError: If the filter graph is inconsistent
            RenderError: If FFmpeg fails or times out
        """
        argv = self._build_ffmpeg_argv(out_path)
        self.ctx.logger.info(f"Running FFmpeg: {' '.join(argv)}")
        await run_ffmpeg_async(
            argv, logger=self.ctx.logger, timeout=self.ctx.render_timeout
        )
        self.ctx.logger.info("FFmpeg completed successfully")


class ShortComposition(Assembly):
    """Clips + optional outro + narration audio -> one vertical video."""

    def __init__(
        self,
        clips: Sequence[ClipSource],
        audio_path: str,
        timeline: Timeline,
        settings: CompositionSettings,
        outro: Optional[ClipSource] = None,
        ctx: Optional[MediaContext] = None,
        encoder: Optional[EncoderProfile] = None,
    ):
        """
        Initialize composition.

        Args:
            clips: Visual clips; clip.index must equal its input number
            audio_path: Narration/music track, mapped as the only audio stream
            timeline: Resolved timing for clips and outro
            settings: Composition settings
            outro: Optional outro source, rendered last
            ctx: Media context for operations
            encoder: Output encoder (H.264 + AAC at the settings fps by default)
        """
        super().__init__(encoder or EncoderProfile.h264(fps=settings.fps), ctx)
        self.clips = list(clips)
        self.audio_path = audio_path
        self.timeline = timeline
        self.settings = settings
        self.outro = outro

    @property
    def outro_index(self) -> Optional[int]:
        return len(self.clips) if self.outro is not None else None

    @property
    def audio_index(self) -> int:
        """Audio is always the last input."""
        return len(self.clips) + (1 if self.outro is not None else 0)

    def _check(self) -> None:
        if not self.clips:
            raise GraphAssemblyError("Cannot assemble a graph without clips")
        if len(self.clips) != len(self.timeline.entries):
            raise GraphAssemblyError(
                f"{len(self.clips)} clips but {len(self.timeline.entries)} timeline entries"
            )
        for position, clip in enumerate(self.clips):
            if clip.index != position:
                raise GraphAssemblyError(
                    f"Clip at position {position} carries index {clip.index}"
                )
        if (self.outro is None) != (self.timeline.outro is None):
            raise GraphAssemblyError("Outro source and outro timing disagree")

    def build_graph(self) -> FilterGraph:
        """Build per-clip chains, the outro chain and the join chain."""
        self._check()
        graph = FilterGraph(input_count=self.audio_index + 1)

        labels = [
            graph.add(clip_node(clip, entry, self.settings))
            for clip, entry in zip(self.clips, self.timeline.entries)
        ]

        outro_label = None
        if self.outro is not None:
            outro_label = graph.add(
                outro_node(self.outro, self.timeline.outro, self.settings, self.outro_index)
            )

        nodes, _ = compose_transitions(labels, self.timeline, outro_label)
        graph.extend(nodes)
        return graph

    def _source_args(self, source: ClipSource, entry: TimelineEntry) -> List[str]:
        if source.kind == MediaKind.IMAGE:
            return [
                "-loop",
                "1",
                "-framerate",
                str(self.settings.fps),
                "-t",
                fmt_number(entry.render_duration),
                "-i",
                source.path,
            ]
        if entry.loops > 0:
            return ["-stream_loop", str(entry.loops), "-i", source.path]
        return ["-i", source.path]

    def _input_args(self) -> List[str]:
        args: List[str] = []
        for clip, entry in zip(self.clips, self.timeline.entries):
            args.extend(self._source_args(clip, entry))
        if self.outro is not None:
            args.extend(self._source_args(self.outro, self.timeline.outro))
        args.extend(["-i", self.audio_path])
        return args

    def _output_args(self, terminal: str) -> List[str]:
        # Cap at the target duration; -shortest would drop the outro or rounding slack
        return [
            "-map",
            f"[{terminal}]",
            "-map",
            f"{self.audio_index}:a",
            "-t",
            fmt_number(self.timeline.total_duration),
        ]


class AudioMerge(Assembly):
    """Several audio files concatenated into one track."""

    def __init__(
        self,
        audio_paths: Sequence[str],
        ctx: Optional[MediaContext] = None,
        encoder: Optional[EncoderProfile] = None,
    ):
        super().__init__(encoder or EncoderProfile.mp3(), ctx)
        self.audio_paths = list(audio_paths)

    def build_graph(self) -> FilterGraph:
        if not self.audio_paths:
            raise GraphAssemblyError("Cannot merge zero audio files")
        count = len(self.audio_paths)
        graph = FilterGraph(input_count=count)
        graph.add(
            FilterNode(
                inputs=[f"{i}:a" for i in range(count)],
                filters=[Filter(name="concat", options={"n": count, "v": 0, "a": 1})],
                output=AUDIO_LABEL,
            )
        )
        return graph

    def _input_args(self) -> List[str]:
        args: List[str] = []
        for path in self.audio_paths:
            args.extend(["-i", path])
        return args

    def _output_args(self, terminal: str) -> List[str]:
        return ["-map", f"[{terminal}]"]


class CaptionBurn(Assembly):
    """Subtitles burned into a video, audio copied untouched."""

    def __init__(
        self,
        video_path: str,
        script_path: str,
        ctx: Optional[MediaContext] = None,
        encoder: Optional[EncoderProfile] = None,
    ):
        super().__init__(encoder or EncoderProfile.h264_copy_audio(), ctx)
        self.video_path = video_path
        self.script_path = script_path

    def build_graph(self) -> FilterGraph:
        graph = FilterGraph(input_count=1)
        graph.add(
            FilterNode(
                inputs=["0:v"],
                filters=[Filter(name="ass", options={"filename": self.script_path})],
                output="vout",
            )
        )
        return graph

    def _input_args(self) -> List[str]:
        return ["-i", self.video_path]

    def _output_args(self, terminal: str) -> List[str]:
        return ["-map", f"[{terminal}]", "-map", "0:a?"]

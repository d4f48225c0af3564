"""Encoder profiles for composition output with FFmpeg argument generation."""

from pydantic import BaseModel
from typing import List, Optional, Literal


class EncoderProfile(BaseModel):
    """Encoder profile that generates FFmpeg arguments."""

    kind: Literal["h264", "h264_copy_audio", "mp3"]
    crf: Optional[int] = None
    preset: Optional[str] = None
    fps: Optional[int] = None
    audio_bitrate: Optional[str] = None

    @property
    def content_type(self) -> str:
        """MIME type of the produced file."""
        return "audio/mpeg" if self.kind == "mp3" else "video/mp4"

    @property
    def suffix(self) -> str:
        """File extension of the produced file."""
        return ".mp3" if self.kind == "mp3" else ".mp4"

    @staticmethod
    def h264(
        crf: int = 20, preset: str = "medium", fps: int = 25, audio_bitrate: str = "192k"
    ) -> "EncoderProfile":
        """
        H.264 + AAC profile for composed shorts.

        Args:
            crf: Constant Rate Factor (lower = higher quality)
            preset: Encoding preset (ultrafast ... veryslow)
            fps: Output frame rate
            audio_bitrate: AAC bitrate

        Returns:
            H.264 encoder profile
        """
        return EncoderProfile(
            kind="h264", crf=crf, preset=preset, fps=fps, audio_bitrate=audio_bitrate
        )

    @staticmethod
    def h264_copy_audio(crf: int = 20, preset: str = "medium") -> "EncoderProfile":
        """
        H.264 profile that copies the source audio untouched (caption burn-in).

        Args:
            crf: Constant Rate Factor
            preset: Encoding preset

        Returns:
            H.264 encoder profile with audio stream copy
        """
        return EncoderProfile(kind="h264_copy_audio", crf=crf, preset=preset)

    @staticmethod
    def mp3(audio_bitrate: str = "192k") -> "EncoderProfile":
        """
        MP3 profile for merged audio.

        Args:
            audio_bitrate: MP3 bitrate

        Returns:
            MP3 encoder profile
        """
        return EncoderProfile(kind="mp3", audio_bitrate=audio_bitrate)

    def args(self, out_path: str) -> List[str]:
        """
        Generate FFmpeg arguments for this encoder profile.

        Args:
            out_path: Output file path

        Returns:
            List of FFmpeg arguments
        """
        if self.kind == "h264":
            args = [
                "-c:v",
                "libx264",
                "-crf",
                str(self.crf or 20),
                "-preset",
                self.preset or "medium",
                "-pix_fmt",
                "yuv420p",
                "-r",
                str(self.fps or 25),
                "-c:a",
                "aac",
                "-b:a",
                self.audio_bitrate or "192k",
                "-movflags",
                "+faststart",
            ]

        elif self.kind == "h264_copy_audio":
            args = [
                "-c:v",
                "libx264",
                "-crf",
                str(self.crf or 20),
                "-preset",
                self.preset or "medium",
                "-pix_fmt",
                "yuv420p",
                "-c:a",
                "copy",
                "-movflags",
                "+faststart",
            ]

        elif self.kind == "mp3":
            args = ["-c:a", "libmp3lame", "-b:a", self.audio_bitrate or "192k"]

        else:
            raise ValueError(f"Unknown encoder kind: {self.kind}")

        # Add output path
        args.append(out_path)

        return args

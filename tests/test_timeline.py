"""Tests for timeline resolution."""

import pytest

from shortcomposer.core import ClipMode, Transition, ValidationError
from shortcomposer.media import ClipSource, CompositionSettings, resolve_timeline
from shortcomposer.media.timeline import DURATION_TOLERANCE, FALLBACK_CLIP_DURATION


def images(count):
    return [ClipSource.image(f"/in/img{i}.jpg", i) for i in range(count)]


def videos(*durations):
    return [ClipSource.video(f"/in/clip{i}.mp4", i, d) for i, d in enumerate(durations)]


class TestDurationSums:
    """Clip durations always fill the target duration."""

    @pytest.mark.parametrize("count", [1, 2, 3, 7])
    @pytest.mark.parametrize("audio", [15.0, 9.99, 31.337])
    def test_auto_mode_sums_to_audio(self, count, audio):
        """Test that clip durations add up to the audio duration."""
        timeline = resolve_timeline(images(count), CompositionSettings(), audio)
        assert abs(sum(timeline.durations) - audio) <= DURATION_TOLERANCE
        assert timeline.total_duration == audio

    @pytest.mark.parametrize("count", [1, 3, 5])
    def test_auto_mode_with_outro(self, count):
        """Test that clips plus outro add up to the audio duration."""
        settings = CompositionSettings(outro_duration=2.0)
        timeline = resolve_timeline(images(count), settings, 20.0, has_outro=True)
        assert abs(sum(timeline.durations) + 2.0 - 20.0) <= DURATION_TOLERANCE
        assert timeline.content_duration == pytest.approx(18.0)
        assert timeline.outro.duration == 2.0
        assert timeline.outro.start == pytest.approx(18.0)
        assert timeline.outro.index == count

    def test_explicit_duration(self):
        """Test that an explicit per-clip duration ignores the audio."""
        settings = CompositionSettings(duration=3)
        timeline = resolve_timeline(images(4), settings, 99.0)
        assert timeline.total_duration == pytest.approx(12.0)
        assert timeline.durations == pytest.approx([3.0] * 4)

    def test_explicit_duration_with_outro(self):
        """Test that the outro is added on top of the explicit clip durations."""
        settings = CompositionSettings(duration=3, outro_duration=1.5)
        timeline = resolve_timeline(images(4), settings, None, has_outro=True)
        assert timeline.total_duration == pytest.approx(13.5)
        assert timeline.content_duration == pytest.approx(12.0)

    def test_starts_are_cumulative(self):
        """Test that each clip starts where the previous one ends."""
        timeline = resolve_timeline(images(4), CompositionSettings(), 10.0)
        starts = [e.start for e in timeline.entries]
        assert starts == pytest.approx([0.0, 2.5, 5.0, 7.5])

    def test_fallback_without_audio_duration(self):
        """Test the per-clip fallback when the audio could not be probed."""
        timeline = resolve_timeline(images(3), CompositionSettings(), None)
        assert timeline.total_duration == pytest.approx(3 * FALLBACK_CLIP_DURATION)
        assert timeline.durations == pytest.approx([FALLBACK_CLIP_DURATION] * 3)

    def test_fallback_with_outro(self):
        """Test that the fallback leaves room for the outro."""
        settings = CompositionSettings(outro_duration=2.0)
        timeline = resolve_timeline(images(2), settings, None, has_outro=True)
        assert timeline.total_duration == pytest.approx(12.0)
        assert timeline.durations == pytest.approx([5.0, 5.0])


class TestImageTimeline:
    """Frame counts and per-clip properties of image timelines."""

    def test_three_images_fifteen_seconds(self):
        """Test the plain three-image case: 5s and 125 frames each."""
        timeline = resolve_timeline(images(3), CompositionSettings(), 15.0)

        assert timeline.fps == 25
        for entry in timeline.entries:
            assert entry.duration == pytest.approx(5.0)
            assert entry.render_duration == pytest.approx(5.0)
            assert entry.frames == 125
            assert entry.loops == 0
            assert entry.source_duration is None
        assert timeline.outro is None

    def test_last_clip_absorbs_remainder(self):
        """Test that rounding remainder lands on the last clip."""
        timeline = resolve_timeline(images(3), CompositionSettings(), 10.0)
        assert sum(timeline.durations) == pytest.approx(10.0, abs=1e-9)

    def test_shorter_than_one_frame(self):
        """Test that clips shorter than one frame are rejected."""
        with pytest.raises(ValidationError):
            resolve_timeline(images(10), CompositionSettings(), 0.1)


class TestVideoTimeline:
    """Loop counts, trimming and speed factors of video timelines."""

    def test_fit_mode_loops_short_clip(self):
        """Test that a 4s clip in a 5s slot loops and a longer one is trimmed."""
        timeline = resolve_timeline(videos(4.0, 8.0), CompositionSettings(), 10.0)
        first, second = timeline.entries

        assert first.duration == pytest.approx(5.0)
        assert first.loops == 2
        assert first.plays == 3
        assert first.source_duration * first.plays > first.render_duration
        assert first.pad_duration == 0.0

        assert second.duration == pytest.approx(5.0)
        assert second.loops == 0
        assert second.plays == 1
        assert second.source_duration > second.render_duration
        assert second.speed == 1.0

    def test_fit_mode_exact_fit_does_not_loop(self):
        """Test that a clip exactly as long as its slot plays once."""
        timeline = resolve_timeline(videos(5.0, 5.0), CompositionSettings(), 10.0)
        assert [e.loops for e in timeline.entries] == [0, 0]

    def test_speed_mode(self):
        """Test that speed mode retimes every clip by one global factor."""
        settings = CompositionSettings(mode=ClipMode.SPEED)
        timeline = resolve_timeline(videos(4.0, 8.0), settings, 6.0)

        assert timeline.durations == pytest.approx([2.0, 4.0])
        assert abs(sum(timeline.durations) - 6.0) <= DURATION_TOLERANCE
        for entry in timeline.entries:
            assert entry.speed == pytest.approx(2.0)
            assert entry.loops == 0

    def test_speed_mode_slows_down(self):
        """Test that a factor below one stretches the clips."""
        settings = CompositionSettings(mode=ClipMode.SPEED)
        timeline = resolve_timeline(videos(3.0, 3.0), settings, 12.0)
        assert timeline.entries[0].speed == pytest.approx(0.5)
        assert timeline.durations == pytest.approx([6.0, 6.0])

    def test_unprobed_clip_uses_fallback(self):
        """Test that an unprobed clip is treated as the fallback length."""
        timeline = resolve_timeline(videos(None, 8.0), CompositionSettings(), 12.0)
        first = timeline.entries[0]
        assert first.source_duration is None
        assert first.loops == 2  # ceil(6 / 5)
        assert first.pad_duration == pytest.approx(first.render_duration)


class TestTransitions:
    """Cross-fade timing."""

    def test_crossfade_offsets(self):
        """Test offsets of chained cross-fades over equal clips."""
        settings = CompositionSettings(transition=Transition.FADE, transition_duration=0.5)
        timeline = resolve_timeline(images(3), settings, 15.0)

        assert timeline.overlap == 0.5
        assert timeline.crossfade_offsets() == pytest.approx([4.5, 9.5])
        assert [e.render_duration for e in timeline.entries] == pytest.approx(
            [5.0, 5.5, 5.5]
        )

    def test_crossfade_offsets_increase(self):
        """Test that offsets are strictly increasing for uneven clips."""
        settings = CompositionSettings(
            transition=Transition.DISSOLVE, transition_duration=0.4, mode=ClipMode.SPEED
        )
        timeline = resolve_timeline(videos(2.0, 6.0, 1.0, 3.0), settings, 12.0)
        offsets = timeline.crossfade_offsets()
        assert len(offsets) == 3
        assert all(b > a for a, b in zip(offsets, offsets[1:]))
        assert offsets[0] > 0

    def test_output_length_matches_target(self):
        """Test that the cross-faded chain is exactly as long as the target."""
        settings = CompositionSettings(transition=Transition.FADE, transition_duration=0.5)
        timeline = resolve_timeline(images(3), settings, 15.0, has_outro=True)
        # Chain length: sum of rendered segments minus one overlap per join
        rendered = [e.render_duration for e in timeline.entries]
        rendered.append(timeline.outro.render_duration)
        joins = len(rendered) - 1
        assert sum(rendered) - joins * timeline.overlap == pytest.approx(15.0)
        assert timeline.outro_offset() == pytest.approx(12.5)

    def test_no_transition_has_no_offsets(self):
        """Test that plain concatenation needs no offsets."""
        timeline = resolve_timeline(images(3), CompositionSettings(), 15.0)
        assert timeline.overlap == 0.0
        assert timeline.crossfade_offsets() == []
        assert timeline.outro_offset() is None

    def test_transition_longer_than_clip(self):
        """Test that a transition as long as a clip is rejected."""
        settings = CompositionSettings(transition=Transition.FADE, transition_duration=5.0)
        with pytest.raises(ValidationError):
            resolve_timeline(images(3), settings, 15.0)

    def test_transition_longer_than_outro(self):
        """Test that a transition as long as the outro is rejected."""
        settings = CompositionSettings(
            transition=Transition.FADE, transition_duration=1.0, outro_duration=1.0
        )
        with pytest.raises(ValidationError):
            resolve_timeline(images(2), settings, 20.0, has_outro=True)

    def test_single_clip_with_transition(self):
        """Test that one clip without outro has nothing to fade into."""
        settings = CompositionSettings(transition=Transition.FADE, transition_duration=0.5)
        timeline = resolve_timeline(images(1), settings, 0.4)
        assert timeline.crossfade_offsets() == []


class TestRejection:
    """Requests that cannot be timed."""

    def test_no_clips(self):
        """Test that zero clips are rejected."""
        with pytest.raises(ValidationError):
            resolve_timeline([], CompositionSettings(), 10.0)

    def test_outro_longer_than_audio(self):
        """Test that an outro filling the whole target is rejected."""
        settings = CompositionSettings(outro_duration=5.0)
        with pytest.raises(ValidationError) as exc_info:
            resolve_timeline(images(2), settings, 4.0, has_outro=True)
        assert exc_info.value.status_code == 400

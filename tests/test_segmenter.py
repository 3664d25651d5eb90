from __future__ import annotations

import random

import pytest

from ytscribe.transcript.models import Cue, TranscriptSegment
from ytscribe.transcript.segmenter import merge_cues


def _cue(text: str, start: float, duration: float) -> Cue:
    return Cue(text=text, start=start, end=start + duration)


def _random_cues(rng: random.Random, count: int, max_len: float) -> list[Cue]:
    cues: list[Cue] = []
    position = 0.0
    for index in range(count):
        position += rng.uniform(-2.0, 4.0)
        position = max(position, 0.0)
        cues.append(_cue(f"w{index}", position, rng.uniform(0.0, max_len)))
    return cues


def test_merge_cues_example() -> None:
    cues = [_cue("a", 0, 10), _cue("b", 10, 15), _cue("c", 25, 10)]

    assert merge_cues(cues, max_duration_s=30) == [
        TranscriptSegment(text="a b", start=0, duration=25),
        TranscriptSegment(text="c", start=25, duration=10),
    ]


def test_merge_cues_keeps_oversized_cue_whole() -> None:
    cues = [_cue("short", 0, 5), _cue("very long", 5, 70), _cue("tail", 75, 2)]

    segments = merge_cues(cues, max_duration_s=30)

    assert [item.text for item in segments] == ["short", "very long", "tail"]
    assert segments[1].duration == 70


def test_merge_cues_empty_and_blank_input() -> None:
    assert merge_cues([]) == []
    assert merge_cues([_cue("  \n ", 0, 1)]) == []


def test_merge_cues_collapses_whitespace() -> None:
    segments = merge_cues([_cue(" hello\nthere ", 0, 2), _cue("world", 2, 2)])
    assert segments == [TranscriptSegment(text="hello there world", start=0, duration=4)]


def test_merge_cues_clamps_overlapping_cues() -> None:
    cues = [_cue("a", 0, 20), _cue("b", 15, 20), _cue("c", 30, 3)]

    segments = merge_cues(cues, max_duration_s=30)

    assert segments[0] == TranscriptSegment(text="a", start=0, duration=20)
    assert segments[1].start == 20
    assert segments[1].text == "b c"


def test_merge_cues_rejects_non_positive_threshold() -> None:
    with pytest.raises(ValueError):
        merge_cues([_cue("a", 0, 1)], max_duration_s=0)


@pytest.mark.parametrize("seed", range(20))
def test_merge_cues_ordered_and_non_overlapping(seed: int) -> None:
    rng = random.Random(seed)
    segments = merge_cues(_random_cues(rng, 200, max_len=45.0), max_duration_s=30)

    for previous, current in zip(segments, segments[1:]):
        assert previous.start <= current.start
        assert previous.end <= current.start + 1e-9
    assert all(item.duration >= 0 for item in segments)


@pytest.mark.parametrize("seed", range(20))
def test_merge_cues_respects_threshold_for_short_cues(seed: int) -> None:
    rng = random.Random(seed)
    segments = merge_cues(_random_cues(rng, 200, max_len=30.0), max_duration_s=30)

    assert segments
    assert all(item.duration <= 30 + 1e-9 for item in segments)

from typing import Dict, List, Optional, Union
from podcontext.models.transcript import Segment, SpeakerBlock, SpeakerTranscript, Transcript

def format_timestamp(ms: int) -> str:
    m, s = divmod(ms // 1000, 60)
    h, m = divmod(m, 60)
    if h > 0:
        return f"{h}:{m:02d}:{s:02d}"
    return f"{m}:{s:02d}"

def list_speakers(blocks: List[SpeakerBlock]) -> List[str]:
    """Sorted unique speaker labels, for offering renames before rendering.

    Named speakers are listed alongside ``Speaker N`` labels, so either kind
    can be renamed.
    """
    return sorted({b.speaker_label for b in blocks if b.speaker_label})

def render_speaker_blocks(blocks: List[SpeakerBlock], speaker_map: Optional[Dict[str, str]] = None) -> str:
    speaker_map = speaker_map or {}
    paragraphs = []
    for block in blocks:
        name = speaker_map.get(block.speaker_label) or block.speaker_label
        paragraphs.append(f"{name}: {' '.join(block.sentences)}")
    return "\n\n".join(paragraphs)

def render_segments(segments: List[Segment], timestamps: bool = True) -> str:
    if not timestamps:
        return "\n".join(s.text for s in segments)
    return "\n".join(f"[{format_timestamp(s.start_ms)}] {s.text}" for s in segments)

def render_transcript(transcript: Union[Transcript, SpeakerTranscript],
                      speaker_map: Optional[Dict[str, str]] = None, timestamps: bool = True) -> str:
    if isinstance(transcript, SpeakerTranscript):
        return render_speaker_blocks(transcript.blocks, speaker_map)
    return render_segments(transcript.segments, timestamps=timestamps)

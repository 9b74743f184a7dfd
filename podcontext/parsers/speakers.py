import re
from typing import Any, List, Optional
from podcontext.models.transcript import SpeakerBlock

_PROPER_NAME_RE = re.compile(r"^[A-Z][a-z]+ [A-Z][a-z]+")


def is_speaker_title(title: str) -> bool:
    return title.startswith("Speaker") or bool(_PROPER_NAME_RE.match(title))


def _section_title(section: Any) -> Optional[str]:
    title = section.get("title")
    if isinstance(title, dict):
        value = title.get("title")
        return value if isinstance(value, str) else None
    return None


def _section_sentence(section: Any) -> Optional[str]:
    text = section.get("text")
    if not isinstance(text, dict):
        return None
    sentence = text.get("sentence")
    if not isinstance(sentence, dict):
        return None
    value = sentence.get("text")
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def group_sections(sections: List[Any]) -> List[SpeakerBlock]:
    """Fold a flat read-along section list into speaker blocks.

    A qualifying title opens a new block; sentences accumulate into the open
    block. Sentences that precede any speaker title are dropped, as are
    blocks without sentences.
    """
    blocks: List[SpeakerBlock] = []
    current: Optional[SpeakerBlock] = None

    def flush():
        if current is not None and current.sentences:
            blocks.append(current)

    for section in sections:
        if not isinstance(section, dict):
            continue
        title = _section_title(section)
        if title is not None and is_speaker_title(title):
            flush()
            current = SpeakerBlock(speaker_label=title, sentences=[])
        sentence = _section_sentence(section)
        if sentence is None or current is None:
            continue
        current.sentences.append(sentence)

    flush()
    return blocks

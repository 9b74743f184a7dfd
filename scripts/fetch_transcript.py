import asyncio
import sys
from podcontext.cli import credentials_from_settings
from podcontext.models.content import ContentRef
from podcontext.services.transcripts import TranscriptService
from podcontext.utils.logger import logger

async def run(ref: ContentRef):
    service = TranscriptService()
    try:
        return await service.acquire(ref, credentials_from_settings(ref))
    finally:
        await service.aclose()

if __name__ == "__main__":
    url = sys.argv[1] if len(sys.argv) > 1 else "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
    ref = ContentRef.parse(url)
    try:
        t = asyncio.run(run(ref))
        print("source:", t.source)
        if ref.is_podcast:
            print("blocks:", len(t.blocks))
            for b in t.blocks[:5]:
                print(f"{b.speaker_label or '-'}: {' '.join(b.sentences)[:80]}")
        else:
            print("segments:", len(t.segments))
            for s in t.segments[:5]:
                print(f"[{s.start_ms} -> {s.end_ms}] {s.text}")
    except Exception as e:
        logger.error(f"Transcript fetch failed: {e}")
        raise

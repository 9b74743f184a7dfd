import argparse
import asyncio
import os
import sys
from typing import Dict, List, Optional
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from podcontext.config import settings
from podcontext.core.errors import (
    AuthenticationFailed, CredentialsNotReady, NoTranscriptAvailable, TranscriptError,
)
from podcontext.models.content import ContentRef
from podcontext.models.credentials import ClientConfig, Credentials, SpotifyCredentials, YouTubeCredentials
from podcontext.models.transcript import SpeakerTranscript
from podcontext.services.render import list_speakers, render_transcript
from podcontext.services.transcripts import AcquisitionResult, TranscriptService
from podcontext.utils.cookies import parse_cookie_header

console = Console()

def credentials_from_settings(ref: ContentRef) -> Credentials:
    if ref.is_podcast:
        return SpotifyCredentials(
            authorization=settings.SPOTIFY_AUTHORIZATION,
            client_token=settings.SPOTIFY_CLIENT_TOKEN,
        )
    return YouTubeCredentials(
        client_config=ClientConfig(visitor_data=settings.YOUTUBE_VISITOR_DATA),
        continuation_params=settings.YOUTUBE_TRANSCRIPT_PARAMS,
        cookies=parse_cookie_header(settings.YOUTUBE_COOKIES),
    )

def parse_speaker_map(pairs: Optional[List[str]]) -> Dict[str, str]:
    speaker_map = {}
    for pair in pairs or []:
        label, sep, name = pair.partition("=")
        if not sep or not label.strip():
            raise ValueError(f"Invalid --speaker value {pair!r}, expected LABEL=NAME")
        speaker_map[label.strip()] = name.strip() or label.strip()
    return speaker_map

def describe_error(error: TranscriptError) -> str:
    if isinstance(error, CredentialsNotReady):
        return f"[yellow]Credentials not ready:[/yellow] {error}"
    if isinstance(error, NoTranscriptAvailable):
        return f"[yellow]No transcript:[/yellow] {error}"
    if isinstance(error, AuthenticationFailed):
        return f"[red]Not authorized:[/red] {error}"
    return f"[bold red]Error:[/bold red] {error}"

def render_speakers(transcript: SpeakerTranscript):
    speakers = list_speakers(transcript.blocks)
    if not speakers:
        return
    table = Table(title="Speakers", show_header=True, header_style="bold magenta")
    table.add_column("Label", style="cyan")
    table.add_column("Blocks", justify="right")
    for label in speakers:
        table.add_row(label, str(sum(1 for b in transcript.blocks if b.speaker_label == label)))
    console.print(table)

async def fetch(ref: ContentRef) -> AcquisitionResult:
    service = TranscriptService()
    try:
        return await service.acquire_transcript(ref, credentials_from_settings(ref))
    finally:
        await service.aclose()

def main():
    parser = argparse.ArgumentParser(description="Fetch a podcast or video transcript")
    parser.add_argument("url", nargs="?", help="Episode/video URL, spotify:episode: URI or raw id")
    parser.add_argument("--url", dest="url", help="Episode/video URL")
    parser.add_argument("--platform", choices=["youtube", "spotify"], help="Platform for a raw id")
    parser.add_argument("--speaker", action="append", metavar="LABEL=NAME", help="Rename a speaker when rendering (repeatable)")
    parser.add_argument("--no-timestamps", action="store_true", help="Omit [m:ss] prefixes on video transcripts")
    parser.add_argument("--json", action="store_true", help="Print the canonical transcript as JSON")
    parser.add_argument("--save", action="store_true", help="Save output under OUTPUT_DIR")

    args = parser.parse_args()

    if not getattr(args, "url", None):
        parser.print_help()
        console.print("[red]Missing URL.[/red] Provide positional URL or --url.")
        sys.exit(2)

    try:
        ref = ContentRef.parse(args.url, platform=args.platform)
        speaker_map = parse_speaker_map(args.speaker)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(2)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=True
    ) as progress:
        progress.add_task(description=f"Fetching {ref.platform} transcript...", total=None)
        result = asyncio.run(fetch(ref))

    if not result.ok:
        console.print(describe_error(result.error))
        if result.attempted:
            console.print(f"[dim]Tried: {', '.join(result.attempted)}[/dim]")
        sys.exit(1)

    transcript = result.transcript
    if args.json:
        output = transcript.model_dump_json(indent=2)
    else:
        output = render_transcript(transcript, speaker_map=speaker_map, timestamps=not args.no_timestamps)
        if not output.strip():
            console.print("[yellow]Transcript is empty[/yellow]")
            sys.exit(1)

    if isinstance(transcript, SpeakerTranscript) and not args.json:
        render_speakers(transcript)
    console.print(output, markup=False, highlight=False)

    if args.save:
        os.makedirs(settings.OUTPUT_DIR, exist_ok=True)
        ext = "json" if args.json else "txt"
        path = os.path.join(settings.OUTPUT_DIR, f"{ref.content_id}_transcript.{ext}")
        with open(path, "w", encoding="utf-8") as f:
            f.write(output)
        console.print(f"\n[blue]Saved output to {path}[/blue]")

if __name__ == "__main__":
    main()

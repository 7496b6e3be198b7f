"""CLI interface with subcommand routing."""

import argparse
import asyncio
import logging
import os
import sys

from segment_studio.api import ContentApiClient
from segment_studio.capture import FileCaptureDevice, ToneCaptureDevice
from segment_studio.constants import API_BASE_URL, CAPTURE_FORMAT, CAPTURE_FORMATS, SESSION_FILE, VERSION
from segment_studio.creation import prepare_chapter, prepare_part, submit_chapter, submit_part
from segment_studio.editor import AudioEditor
from segment_studio.errors import SegmentStudioError
from segment_studio.recorder import format_elapsed
from segment_studio.session import clear_session, load_session, save_session, token_accessor


def _fail(message: str):
    print(f"Error: {message}", file=sys.stderr)
    raise SystemExit(1)


def _client(args) -> ContentApiClient:
    return ContentApiClient(base_url=args.api_url, token=token_accessor(args.session))


async def _open_editor(args, device=None) -> AudioEditor:
    """Load the artifact, exiting on a page-level load failure."""
    editor = AudioEditor(_client(args), args.audio_id, device=device)
    if await editor.load() is None:
        _fail(editor.load_error)
    return editor


def _print_artifact(artifact) -> None:
    print(f"Audio:    {artifact.id} ({artifact.title or 'untitled'})")
    print(f"Status:   {artifact.status}")
    if artifact.file_url:
        print(f"File:     {artifact.file_url}")
    ids = artifact.segment_public_ids
    print(f"Segments: {len(ids)}")
    for i, public_id in enumerate(ids):
        print(f"  {i:>3}  {public_id}")


def _finish(editor: AudioEditor, ok: bool) -> None:
    if editor.banner.message:
        stream = sys.stdout if ok else sys.stderr
        print(editor.banner.message, file=stream)
    if not ok:
        raise SystemExit(1)


def cmd_login(args):
    """Store a bearer token in session storage."""
    data = load_session(args.session)
    data["token"] = args.token
    path = save_session(data, args.session)
    print(f"Token saved to {path}")


def cmd_logout(args):
    if clear_session(args.session):
        print("Session cleared.")
    else:
        print("No session to clear.")


def cmd_show(args):
    async def run():
        editor = await _open_editor(args)
        _print_artifact(editor.artifact)
    asyncio.run(run())


def cmd_next_order(args):
    """Print the order the next chapter or part would receive."""
    api = _client(args)

    async def run():
        if args.parts or args.chapter:
            return await prepare_part(api, args.audio_id, chapter_id=args.chapter)
        return await prepare_chapter(api, args.audio_id)

    draft = asyncio.run(run())
    print(draft.order)


def _create(args, kind: str):
    api = _client(args)

    async def run():
        if kind == "chapter":
            draft = await prepare_chapter(api, args.audio_id)
        else:
            draft = await prepare_part(api, args.audio_id, chapter_id=args.chapter)
        draft.title = args.title
        draft.description = args.description or ""
        if args.publish:
            draft.status = "PUBLISHED"
        submit = submit_chapter if kind == "chapter" else submit_part
        return await submit(api, draft)

    try:
        unit = asyncio.run(run())
    except SegmentStudioError as e:
        _fail(str(e))
    print(f"Created {kind} {unit.id} (order {unit.order}): {unit.title}")


def cmd_new_chapter(args):
    _create(args, "chapter")


def cmd_new_part(args):
    _create(args, "part")


def cmd_upload(args):
    """Stage local files and upload them as one batch."""
    for path in args.files:
        if not os.path.exists(path):
            _fail(f"File not found: {path}")

    async def run():
        editor = await _open_editor(args)
        try:
            editor.stage_files(args.files)
        except OSError as e:
            _fail(f"Could not read {e.filename}: {e.strerror}")
        ok = await editor.upload()
        if ok:
            _print_artifact(editor.artifact)
        _finish(editor, ok)
    asyncio.run(run())


def cmd_record(args):
    """Record a segment from a file or a test tone and upload it."""
    if args.source:
        if not os.path.exists(args.source):
            _fail(f"File not found: {args.source}")
        device = FileCaptureDevice(args.source, fmt=args.format)
    else:
        device = ToneCaptureDevice(frequency=args.tone, fmt=args.format)

    async def run():
        editor = await _open_editor(args, device=device)
        try:
            if not await editor.start_recording():
                _finish(editor, False)
            print(f"Recording {args.seconds}s...")
            while editor.recorder.elapsed_seconds < args.seconds:
                await asyncio.sleep(editor.recorder.tick_seconds / 4)
            clip = await editor.stop_recording()
            if clip is None:
                _finish(editor, False)
            print(f"Recorded {format_elapsed(editor.recorder.elapsed_seconds)} ({len(clip.data)} bytes)")
            segment = editor.keep_recording()
            print(f"Queued {segment.filename}")
            if args.no_upload:
                return
            ok = await editor.upload()
            if ok:
                _print_artifact(editor.artifact)
            _finish(editor, ok)
        finally:
            await editor.close()
    asyncio.run(run())


def cmd_move(args):
    direction = -1 if args.direction == "up" else 1

    async def run():
        editor = await _open_editor(args)
        ok = await editor.move(args.index, direction)
        if ok:
            _print_artifact(editor.artifact)
        _finish(editor, ok)
    asyncio.run(run())


def cmd_remove(args):
    async def run():
        editor = await _open_editor(args)
        ok = await editor.remove(args.public_id)
        if ok:
            _print_artifact(editor.artifact)
        _finish(editor, ok)
    asyncio.run(run())


def cmd_merge(args):
    async def run():
        editor = await _open_editor(args)
        ok = await editor.merge()
        if ok:
            _print_artifact(editor.artifact)
        _finish(editor, ok)
    asyncio.run(run())


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="segment-studio",
        description="Segment Studio — order chapters and assemble recorded audio segments",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("--api-url", default=API_BASE_URL, help="Content API base URL")
    parser.add_argument("--session", default=SESSION_FILE, help="Session file holding the bearer token")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # login / logout
    login_parser = subparsers.add_parser("login", help="Store a bearer token")
    login_parser.add_argument("token", help="Bearer token")
    login_parser.set_defaults(func=cmd_login)

    logout_parser = subparsers.add_parser("logout", help="Forget the stored token")
    logout_parser.set_defaults(func=cmd_logout)

    # show
    show_parser = subparsers.add_parser("show", help="Show an audio and its segments")
    show_parser.add_argument("audio_id")
    show_parser.set_defaults(func=cmd_show)

    # next-order
    order_parser = subparsers.add_parser("next-order", help="Show the next free chapter or part order")
    order_parser.add_argument("audio_id")
    order_parser.add_argument("--parts", action="store_true", help="Parts of the audio instead of chapters")
    order_parser.add_argument("--chapter", help="Parts within this chapter")
    order_parser.set_defaults(func=cmd_next_order)

    # new-chapter / new-part
    for name, func, help_text in (
        ("new-chapter", cmd_new_chapter, "Create a chapter at the next free order"),
        ("new-part", cmd_new_part, "Create a part at the next free order"),
    ):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("audio_id")
        p.add_argument("title")
        p.add_argument("--description")
        p.add_argument("--publish", action="store_true", help="Create as PUBLISHED instead of DRAFT")
        if name == "new-part":
            p.add_argument("--chapter", help="Create inside this chapter")
        p.set_defaults(func=func)

    # upload
    upload_parser = subparsers.add_parser("upload", help="Append audio files as segments")
    upload_parser.add_argument("audio_id")
    upload_parser.add_argument("files", nargs="+")
    upload_parser.set_defaults(func=cmd_upload)

    # record
    record_parser = subparsers.add_parser("record", help="Record a segment and append it")
    record_parser.add_argument("audio_id")
    source = record_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--source", help="Audio file used as the input signal")
    source.add_argument("--tone", type=float, help="Generate a test tone at this frequency (Hz)")
    record_parser.add_argument("--seconds", type=int, default=5)
    record_parser.add_argument("--format", default=CAPTURE_FORMAT, choices=sorted(CAPTURE_FORMATS))
    record_parser.add_argument("--no-upload", action="store_true", help="Record only")
    record_parser.set_defaults(func=cmd_record)

    # move
    move_parser = subparsers.add_parser("move", help="Move a segment one place up or down")
    move_parser.add_argument("audio_id")
    move_parser.add_argument("index", type=int)
    move_parser.add_argument("direction", choices=["up", "down"])
    move_parser.set_defaults(func=cmd_move)

    # remove
    remove_parser = subparsers.add_parser("remove", help="Delete a segment")
    remove_parser.add_argument("audio_id")
    remove_parser.add_argument("public_id")
    remove_parser.set_defaults(func=cmd_remove)

    # merge
    merge_parser = subparsers.add_parser("merge", help="Publish and merge all segments into one file")
    merge_parser.add_argument("audio_id")
    merge_parser.set_defaults(func=cmd_merge)

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if not args.command:
        parser.print_help()
        return

    args.func(args)

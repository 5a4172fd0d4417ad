"""Console front end: practice French in text or audio mode from a terminal."""

import argparse
import asyncio
import logging
import os

from config import create_controller, get_config
from domain.errors import AlreadyActiveError
from domain.models import Message
from ports.status import StatusPort
from use_cases.sessions import LEARNING_TIPS, QUICK_PHRASES, AudioSession, TextSession

logger = logging.getLogger(__name__)

TEXT_HELP = (
    "Type French and press Enter. Commands: /mic dictate, /phrases, /<n> use phrase n, "
    "/tips, /mute, /quit"
)
AUDIO_HELP = "Press Enter to speak, 'm' + Enter to toggle mute, 'q' + Enter to quit"


class ConsoleStatus(StatusPort):
    _PREFIX = {"success": "✓", "error": "✗", "info": "·"}

    def report(self, message: str, kind: str = "info") -> None:
        print(f"  {self._PREFIX.get(kind, '·')} {message}")


def render_message(message: Message) -> str:
    who = "Vous" if message.is_user else "Buddy"
    lines = [f"[{message.timestamp:%H:%M:%S}] {who}: {message.text}"]
    lines.extend(f"    ⚠️ Correction: {c}" for c in message.corrections)
    lines.extend(f"    💡 Suggestion: {s}" for s in message.suggestions)
    return "\n".join(lines)


async def _prompt(text: str) -> str:
    return await asyncio.to_thread(input, text)


async def run_text(session: TextSession) -> None:
    print(TEXT_HELP)
    for message in session.messages:
        print(render_message(message))

    while True:
        line = (await _prompt(f"{session.draft + ' ' if session.draft else ''}> ")).strip()
        if line == "/quit":
            return
        if line == "/mic":
            text = await session.dictate()
            if text:
                print(f"Draft: {text} (press Enter to send)")
            continue
        if line == "/phrases":
            for i, phrase in enumerate(QUICK_PHRASES, 1):
                print(f"  /{i} {phrase}")
            continue
        if line == "/tips":
            for tip in LEARNING_TIPS:
                print(f"  {tip}")
            continue
        if line == "/mute":
            muted = session.controller.toggle_mute()
            print("Replies muted" if muted else "Replies spoken")
            continue
        if line.startswith("/") and line[1:].isdigit():
            index = int(line[1:]) - 1
            if 0 <= index < len(QUICK_PHRASES):
                session.fill(QUICK_PHRASES[index])
                print(f"Draft: {session.draft}")
            continue
        if line:
            session.fill(line)

        try:
            turn = await session.send()
        except AlreadyActiveError as e:
            print(f"Busy: {e}")
            continue
        if turn is not None:
            print(render_message(turn.user))
            print(render_message(turn.assistant))


async def run_audio(session: AudioSession) -> None:
    print(AUDIO_HELP)
    print(session.current_text)

    while True:
        line = (await _prompt("🎙️  ")).strip().lower()
        if line == "q":
            return
        if line == "m":
            print("🔇 Muted" if session.toggle_mute() else "🔊 Unmuted")
            continue
        try:
            turn = await session.talk()
        except AlreadyActiveError as e:
            print(f"Busy: {e}")
            continue
        if turn is not None:
            print(render_message(turn.user))
        print(session.current_text)
        await session.controller.wait_idle()


async def run(mode: str, speak: bool) -> None:
    cfg = get_config()
    logger.info(f"Starting {mode} session (speak={speak})")
    controller = create_controller(
        cfg,
        status=ConsoleStatus(),
        capture=True,
        playback=speak,
    )
    if mode == "text":
        session = TextSession(controller, speak_replies=speak)
        runner = run_text(session)
    else:
        session = AudioSession(controller)
        if not speak:
            controller.set_muted(True)
        runner = run_audio(session)

    try:
        await runner
    finally:
        session.close()


def main() -> int:
    p = argparse.ArgumentParser(description="French conversation practice")
    p.add_argument("mode", choices=["text", "audio"], nargs="?", default="text")
    p.add_argument("--no-speak", action="store_true", help="never speak replies aloud")
    p.add_argument("--debug", action="store_true")
    args = p.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug or os.environ.get("DEBUG", "0") == "1" else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        asyncio.run(run(args.mode, speak=not args.no_speak))
    except (KeyboardInterrupt, EOFError):
        print()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

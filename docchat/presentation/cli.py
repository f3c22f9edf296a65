import asyncio
import logging
import subprocess
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import httpx

from docchat.config.settings import settings
from docchat.container import close_resources, configure_container, container, init_resources
from docchat.core.exceptions import DocChatError
from docchat.core.models.chat import ChatMessage, Role
from docchat.core.services.agent_service import AgentExecutor
from docchat.core.services.chat_service import ChatService
from docchat.core.services.ingest_service import IngestService

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

USAGE = """Usage: python -m docchat.presentation.cli <command>
Commands:
  startup                         index docs, then run the chat UI
  ingest [path] [--replace]       index one document, or the whole docs folder
  ask <basic|document|agent> <text>"""


def wait_for_llm() -> bool:
    """Wait until a self-hosted OpenAI-compatible server answers.

    Returns:
        True if server ready (or api.openai.com is used), False otherwise.
    """
    if not settings.llm_base_url:
        return True

    url = f"{settings.llm_base_url.rstrip('/')}/models"
    logger.info(f"Checking LLM server: {url}")

    for attempt in range(30):
        try:
            resp = httpx.get(url, timeout=5)
            if resp.status_code == 200:
                logger.info(f"LLM server is ready ({settings.llm_model})")
                return True
        except httpx.HTTPError:
            pass
        logger.info(f"Waiting for LLM server... ({attempt + 1}/30)")
        time.sleep(2)

    logger.error("LLM server not available")
    return False


async def _ingest(args: list[str]) -> None:
    replace = "--replace" in args
    paths = [a for a in args if a != "--replace"]
    ingest_service = container.resolve(IngestService)

    await init_resources()
    try:
        if paths:
            for path in paths:
                result = await ingest_service.ingest(path, replace=replace)
                logger.info(f"Indexed {result.chunks} chunks from {result.source_id}")
        else:
            results = await ingest_service.ingest_directory(replace=replace)
            logger.info(f"Indexed {sum(r.chunks for r in results)} chunks")
    finally:
        await close_resources()


async def _ask(mode: str, text: str) -> str:
    await init_resources()
    try:
        if mode == "basic":
            return await container.resolve(ChatService).basic_chat(text)
        if mode == "document":
            return await container.resolve(ChatService).document_chat(text)
        if mode == "agent":
            result = await container.resolve(AgentExecutor).run(
                [ChatMessage(role=Role.USER, content=text)]
            )
            return result.output
        raise SystemExit(f"Unknown mode: {mode}")
    finally:
        await close_resources()


def cmd_startup():
    """Startup command - init, index, run."""
    logger.info("Starting docchat...")

    if not wait_for_llm():
        sys.exit(1)

    configure_container(settings)
    # re-index every source in place so restarts do not duplicate chunks
    asyncio.run(_ingest(["--replace"]))

    logger.info("Starting Chainlit...")
    subprocess.run(
        [
            sys.executable,
            "-m",
            "chainlit",
            "run",
            str(Path(__file__).parent / "chainlit_app.py"),
            "--host",
            "0.0.0.0",
            "--port",
            "8000",
        ]
    )


def cmd_ingest(args: list[str]):
    """Ingest command - index documents only."""
    configure_container(settings)
    asyncio.run(_ingest(args))


def cmd_ask(args: list[str]):
    if len(args) < 2:
        print(USAGE)
        sys.exit(1)
    configure_container(settings)
    print(asyncio.run(_ask(args[0], " ".join(args[1:]))))


def main():
    """CLI entry point."""
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)

    command, args = sys.argv[1], sys.argv[2:]

    try:
        if command == "startup":
            cmd_startup()
        elif command == "ingest":
            cmd_ingest(args)
        elif command == "ask":
            cmd_ask(args)
        else:
            print(f"Unknown command: {command}")
            sys.exit(1)
    except DocChatError as e:
        logger.error(f"{e.code}: {e.to_dict()['error']['message']}")
        sys.exit(1)


if __name__ == "__main__":
    main()

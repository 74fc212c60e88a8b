import asyncio
import getpass
import signal

from dotenv import load_dotenv
from loguru import logger

from assistant_chat.app_config import default_api_key, load_json_config, parse_app_config
from assistant_chat.bootstrap import bootstrap_runtime
from assistant_chat.chat_app import ChatApp


def _prompt_api_key() -> str:
    default = default_api_key()
    hint = " [press Enter to use OPENAI_API_KEY]" if default else ""
    entered = getpass.getpass(f"OpenAI API key{hint}: ").strip()
    return entered or default


async def _wait_for_reply(app: ChatApp) -> None:
    """Hold the prompt while a reply is pending; Ctrl+C cancels the run instead of exiting."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, app.cancel_runs)
    except NotImplementedError:
        # Windows event loops have no signal handlers; Ctrl+C keeps its default meaning.
        await app.wait_idle()
        return
    try:
        await app.wait_idle()
    finally:
        loop.remove_signal_handler(signal.SIGINT)


async def main() -> None:
    load_dotenv()

    config = parse_app_config(load_json_config())
    runtime = bootstrap_runtime(config)
    app = runtime.app

    print("assistant-chat: OpenAI Assistants math tutor (type 'exit' to quit, '/help' for commands)")
    print(f"Assistant: {config.assistant.name} ({config.assistant.model})")
    if runtime.log_descriptions:
        print(f"Logging: {', '.join(runtime.log_descriptions)}")
    print()

    try:
        while not runtime.controller.state.is_ready:
            try:
                api_key = await asyncio.to_thread(_prompt_api_key)
            except (EOFError, KeyboardInterrupt):
                return
            if not api_key:
                print("An API key is required.")
                continue
            await app.setup(api_key)

        print("Ready. Ask a math question to get started.\n")

        while True:
            try:
                user_input = await asyncio.to_thread(input, "you> ")
            except (EOFError, KeyboardInterrupt):
                break

            trimmed = user_input.strip()
            if trimmed in ("exit", "quit"):
                break
            if not trimmed:
                continue

            try:
                await app.handle_input(user_input)
                await _wait_for_reply(app)
            except Exception as ex:
                logger.error(f"Unhandled error: {ex}")
    finally:
        await app.aclose()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()

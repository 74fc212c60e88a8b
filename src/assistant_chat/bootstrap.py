from __future__ import annotations

from dataclasses import dataclass

from assistant_chat.app_config import AppConfig
from assistant_chat.chat_app import ChatApp
from assistant_chat.controller import ChatController
from assistant_chat.logging_config import setup_logging


@dataclass
class AppRuntime:
    controller: ChatController
    app: ChatApp
    log_descriptions: list[str]


def bootstrap_runtime(config: AppConfig, *, show_spinner: bool = True) -> AppRuntime:
    log_descriptions = setup_logging(level=config.log_level, consumers=config.log_consumers)
    controller = ChatController(config)
    app = ChatApp(controller, show_spinner=show_spinner)
    return AppRuntime(controller=controller, app=app, log_descriptions=log_descriptions)

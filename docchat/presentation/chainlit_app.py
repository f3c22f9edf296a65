import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import chainlit as cl

from docchat.config.settings import settings
from docchat.container import close_resources, configure_container, container, init_resources
from docchat.core.exceptions import ConvergenceError, DocChatError
from docchat.core.models.chat import ChatHistory
from docchat.core.protocols.embedder import EmbedderProtocol
from docchat.core.services.agent_service import AgentExecutor
from docchat.core.services.chat_service import ChatService

configure_container(settings)

BASIC = "Basic"
CONTEXT = "Context"
DOCUMENTS = "Documents"
AGENT = "Agent"


@cl.set_chat_profiles
async def chat_profiles():
    return [
        cl.ChatProfile(name=BASIC, markdown_description="Single question, no memory."),
        cl.ChatProfile(
            name=CONTEXT, markdown_description="Remembers the earlier turns of this chat."
        ),
        cl.ChatProfile(
            name=DOCUMENTS, markdown_description="Answers from the indexed documents."
        ),
        cl.ChatProfile(name=AGENT, markdown_description="Can search the web before answering."),
    ]


async def _run_agent(history: ChatHistory, user_input: str) -> str:
    agent = container.resolve(AgentExecutor)
    result = await agent.run(history.with_pending(user_input))

    for step in result.steps:
        async with cl.Step(name=step.tool_call.name) as ui_step:
            ui_step.input = step.tool_call.arguments
            ui_step.output = step.observation

    return result.output


async def _respond(profile: str, history: ChatHistory, user_input: str) -> str:
    chat_service = container.resolve(ChatService)

    if profile == CONTEXT:
        return await chat_service.context_aware_chat(history.with_pending(user_input))
    if profile == DOCUMENTS:
        return await chat_service.document_chat(user_input)
    if profile == AGENT:
        return await _run_agent(history, user_input)
    return await chat_service.basic_chat(user_input)


@cl.on_chat_start
async def start():
    cl.user_session.set("history", ChatHistory())

    embedder = container.resolve(EmbedderProtocol)
    embedder.warmup()
    await init_resources()

    profile = cl.user_session.get("chat_profile") or BASIC
    await cl.Message(content=f"Hi! You are in **{profile}** mode. Ask me anything.").send()


@cl.on_message
async def main(message: cl.Message):
    user_input = message.content.strip()
    profile = cl.user_session.get("chat_profile") or BASIC
    history: ChatHistory | None = cl.user_session.get("history")
    if history is None:
        history = ChatHistory()
        cl.user_session.set("history", history)

    try:
        response = await _respond(profile, history, user_input)
    except ConvergenceError as e:
        await cl.Message(content=f"Could not finish the answer: {e.message}").send()
        return
    except DocChatError as e:
        await cl.Message(content=f"Error: {e.to_dict()['error']['message']}").send()
        return

    await cl.Message(content=response).send()
    history.add_pair(user_input, response)


@cl.on_stop
async def stop():
    await cl.Message(content="Generation stopped").send()


@cl.on_app_shutdown
async def shutdown():
    await close_resources()

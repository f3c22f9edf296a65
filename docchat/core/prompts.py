"""Prompt templates for each chat mode."""
from .models.template import PromptTemplate

BASIC_CHAT = "basic_chat"
CONTEXT_AWARE_CHAT = "context_aware_chat"
DOCUMENT_CONTEXT_CHAT = "document_context_chat"

BASIC_CHAT_TEMPLATE = PromptTemplate(
    name=BASIC_CHAT,
    template="""You are an expert software engineer, give concise response.
User: {input}
AI:""",
    input_variables=("input",),
)

CONTEXT_AWARE_CHAT_TEMPLATE = PromptTemplate(
    name=CONTEXT_AWARE_CHAT,
    template="""You are an expert software engineer, give concise response.
Use the conversation so far to understand the current message.

Current conversation:
{chat_history}

User: {input}
AI:""",
    input_variables=("chat_history", "input"),
)

DOCUMENT_CONTEXT_CHAT_TEMPLATE = PromptTemplate(
    name=DOCUMENT_CONTEXT_CHAT,
    template="""Answer the question based only on the following context.
If the context does not contain the answer, say that you don't know.

Context:
{context}

Question: {question}
Answer:""",
    input_variables=("context", "question"),
)

DEFAULT_TEMPLATES = (
    BASIC_CHAT_TEMPLATE,
    CONTEXT_AWARE_CHAT_TEMPLATE,
    DOCUMENT_CONTEXT_CHAT_TEMPLATE,
)

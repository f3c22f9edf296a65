import pytest

from docchat.core.exceptions import TemplateError
from docchat.core.models.template import PromptTemplate
from docchat.core.prompts import BASIC_CHAT, CONTEXT_AWARE_CHAT, DOCUMENT_CONTEXT_CHAT
from docchat.core.services.prompt_service import PromptService


def test_default_templates_are_registered(prompts):
    assert set(prompts.names) == {BASIC_CHAT, CONTEXT_AWARE_CHAT, DOCUMENT_CONTEXT_CHAT}
    assert prompts.get(DOCUMENT_CONTEXT_CHAT).input_variables == ("context", "question")


def test_basic_chat_renders_input(prompts):
    rendered = prompts.render(BASIC_CHAT, {"input": "What is pgvector?"})
    assert rendered.startswith("You are an expert software engineer, give concise response.")
    assert "User: What is pgvector?" in rendered
    assert rendered.endswith("AI:")


def test_placeholder_syntax_in_values_is_not_expanded(prompts):
    rendered = prompts.render(BASIC_CHAT, {"input": "print {context}"})
    assert "print {context}" in rendered


def test_extra_variables_are_ignored(prompts):
    rendered = prompts.render(BASIC_CHAT, {"input": "hi", "unused": "x"})
    assert "User: hi" in rendered


def test_missing_variable_raises(prompts):
    with pytest.raises(TemplateError) as exc_info:
        prompts.render(DOCUMENT_CONTEXT_CHAT, {"question": "q"})
    assert exc_info.value.details["missing"] == ["context"]


def test_unknown_template_raises(prompts):
    with pytest.raises(TemplateError):
        prompts.get("nope")


def test_declared_variables_must_match_placeholders():
    with pytest.raises(TemplateError):
        PromptTemplate(name="broken", template="Hello {name}", input_variables=("user",))


def test_duplicate_names_are_rejected():
    template = PromptTemplate(name="t", template="{x}", input_variables=("x",))
    with pytest.raises(TemplateError):
        PromptService([template, template])

"""
Unit Tests: AI Service

Tests the OpenAI / Anthropic adapter with mocked SDK clients.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from growcoach.domain.exceptions import AIServiceError
from growcoach.infrastructure.external_services import AIServiceImpl


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def openai_service():
    """OpenAI-backed service with a mocked client"""
    service = AIServiceImpl(provider="openai", model="gpt-test", openai_api_key="sk-test")
    service.openai_client = Mock()
    service.openai_client.chat.completions.create = AsyncMock(return_value=SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content='Hi\n{"stage": "intro"}'))]
    ))
    return service


@pytest.fixture
def anthropic_service():
    """Anthropic-backed service with a mocked client"""
    service = AIServiceImpl(provider="anthropic", model="claude-test", anthropic_api_key="sk-ant-test")
    service.anthropic_client = Mock()
    service.anthropic_client.messages.create = AsyncMock(return_value=SimpleNamespace(
        content=[
            SimpleNamespace(type="text", text="Hello "),
            SimpleNamespace(type="text", text='{"stage": "goal"}'),
        ]
    ))
    return service


# ============================================================================
# GENERATE
# ============================================================================

@pytest.mark.asyncio
async def test_openai_generate(openai_service):
    reply = await openai_service.generate(["system text", "USER: hi", "format"])

    assert reply == 'Hi\n{"stage": "intro"}'
    kwargs = openai_service.openai_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "gpt-test"
    assert kwargs["messages"] == [
        {"role": "system", "content": "system text"},
        {"role": "user", "content": "USER: hi\n\nformat"},
    ]


@pytest.mark.asyncio
async def test_anthropic_generate(anthropic_service):
    reply = await anthropic_service.generate(["system text", "USER: hi"])

    assert reply == 'Hello {"stage": "goal"}'
    kwargs = anthropic_service.anthropic_client.messages.create.call_args.kwargs
    assert kwargs["system"] == "system text"
    assert kwargs["messages"] == [{"role": "user", "content": "USER: hi"}]


@pytest.mark.asyncio
async def test_generate_wraps_provider_errors(openai_service):
    openai_service.openai_client.chat.completions.create.side_effect = RuntimeError("rate limited")

    with pytest.raises(AIServiceError) as exc_info:
        await openai_service.generate(["system", "USER: hi"])

    assert "rate limited" in exc_info.value.message


@pytest.mark.asyncio
async def test_generate_requires_parts(openai_service):
    with pytest.raises(ValueError):
        await openai_service.generate([])


def test_unknown_provider():
    with pytest.raises(ValueError):
        AIServiceImpl(provider="llama", model="x")


# ============================================================================
# HEALTH
# ============================================================================

@pytest.mark.asyncio
async def test_health_check_ok(anthropic_service):
    assert await anthropic_service.health_check() == {"anthropic": True}


@pytest.mark.asyncio
async def test_health_check_failure(openai_service):
    openai_service.openai_client.chat.completions.create.side_effect = RuntimeError("401")

    assert await openai_service.health_check() == {"openai": False}

"""
Unit Tests: Session Use Cases

Tests session creation, coaching turns, history paging and session listing.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from growcoach.application.dto import RunTurnDTO
from growcoach.application.use_cases import (
    CreateSessionUseCase,
    GetHistoryUseCase,
    ListSessionsUseCase,
    RunTurnUseCase,
)
from growcoach.domain.exceptions import (
    AIServiceError,
    InvalidInputError,
    MalformedModelOutputError,
    PersistenceError,
)
from growcoach.domain.repositories import messages_collection, session_path
from growcoach.domain.value_objects import Stage

from helpers import ScriptedAIService, coach_reply


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def create_session(session_cache):
    return CreateSessionUseCase(session_cache)


@pytest.fixture
def run_turn(session_cache, ai_service):
    return RunTurnUseCase(session_cache, ai_service, max_user_text_length=100)


@pytest.fixture
def get_history(session_cache):
    return GetHistoryUseCase(session_cache, default_limit=3, max_limit=5)


async def _stored_messages(store, user_id, session_id):
    return [record.data for record in await store.query(messages_collection(user_id, session_id))]


# ============================================================================
# CREATE SESSION
# ============================================================================

@pytest.mark.asyncio
async def test_create_session(create_session):
    result = await create_session.execute("u1", "Kanon")

    assert result.stage == "intro"
    assert result.coach_type == "kanon"
    assert result.to_dict() == {"sessionId": result.session_id, "stage": "intro", "coachType": "kanon"}


@pytest.mark.asyncio
async def test_create_session_unknown_coach_type_uses_default(create_session):
    result = await create_session.execute("u1", "sensei")
    assert result.coach_type == "akito"


@pytest.mark.asyncio
@pytest.mark.parametrize("user_id", ["", "   ", None, "a/b"])
async def test_create_session_rejects_bad_user_id(create_session, user_id):
    with pytest.raises(InvalidInputError):
        await create_session.execute(user_id)


# ============================================================================
# RUN TURN
# ============================================================================

@pytest.mark.asyncio
async def test_run_turn_happy_path(create_session, run_turn, ai_service, store):
    """Test: reply parsed, state validated, both messages persisted"""
    session = await create_session.execute("u1")
    ai_service.replies = ['Great job!\n{"stage":"Goal","user_goals":["sleep better"]}']

    result = await run_turn.execute(RunTurnDTO("u1", session.session_id, "  I want to sleep better  "))

    assert result.message == "Great job!"
    assert result.stage == "goal"
    assert result.state["user_goals"] == ["sleep better"]
    assert result.state["options"] == []
    assert result.coach_type == "akito"

    stored = await _stored_messages(store, "u1", session.session_id)
    assert [(record["role"], record["content"]) for record in stored] == [
        ("user", "I want to sleep better"),
        ("coach", "Great job!"),
    ]
    assert (await store.get(session_path("u1", session.session_id)))["stage"] == "goal"


@pytest.mark.asyncio
async def test_run_turn_prompt_contains_history(create_session, run_turn, ai_service):
    session = await create_session.execute("u1")
    ai_service.replies = [coach_reply("First reply", stage="intro"), coach_reply("Second reply")]

    await run_turn.execute(RunTurnDTO("u1", session.session_id, "hello"))
    await run_turn.execute(RunTurnDTO("u1", session.session_id, "next"))

    parts = ai_service.calls[1]
    assert "USER: hello" in parts
    assert "COACH: First reply" in parts
    assert parts[-2] == "USER: next"
    assert "Current stage: intro" in parts


@pytest.mark.asyncio
async def test_run_turn_coach_type_override(create_session, run_turn, store):
    session = await create_session.execute("u1", "akito")

    result = await run_turn.execute(RunTurnDTO("u1", session.session_id, "hi", coach_type="naruka"))

    assert result.coach_type == "naruka"
    assert (await store.get(session_path("u1", session.session_id)))["coachType"] == "naruka"


@pytest.mark.asyncio
async def test_run_turn_without_json_leaves_session_untouched(
    create_session, run_turn, ai_service, store, session_cache
):
    """Test: a reply with no JSON object fails and nothing is recorded"""
    session = await create_session.execute("u1")
    ai_service.replies = ["Sorry, I lost my train of thought."]

    with pytest.raises(MalformedModelOutputError):
        await run_turn.execute(RunTurnDTO("u1", session.session_id, "hello"))

    entry = await session_cache.load("u1", session.session_id)
    assert entry.messages == []
    assert entry.stage is Stage.INTRO
    assert await _stored_messages(store, "u1", session.session_id) == []


@pytest.mark.asyncio
async def test_run_turn_deeply_nested_reply_is_malformed(
    create_session, run_turn, ai_service, store
):
    """Test: a reply nested past the parser's depth is a typed failure"""
    session = await create_session.execute("u1")
    ai_service.replies = ['Hi there\n{"stage": "goal", "x": ' + "[" * 100000 + "]" * 100000 + "}"]

    with pytest.raises(MalformedModelOutputError):
        await run_turn.execute(RunTurnDTO("u1", session.session_id, "hello"))

    assert await _stored_messages(store, "u1", session.session_id) == []


@pytest.mark.asyncio
async def test_run_turn_generator_failure(create_session, session_cache, store):
    session = await create_session.execute("u1")
    failing = ScriptedAIService()
    failing.generate = AsyncMock(side_effect=ConnectionError("provider unreachable"))
    use_case = RunTurnUseCase(session_cache, failing)

    with pytest.raises(AIServiceError):
        await use_case.execute(RunTurnDTO("u1", session.session_id, "hello"))

    assert await _stored_messages(store, "u1", session.session_id) == []


@pytest.mark.asyncio
@pytest.mark.parametrize("user_text", ["", "    ", None, "x" * 101])
async def test_run_turn_rejects_bad_text(create_session, run_turn, ai_service, user_text):
    session = await create_session.execute("u1")

    with pytest.raises(InvalidInputError) as exc_info:
        await run_turn.execute(RunTurnDTO("u1", session.session_id, user_text))

    assert exc_info.value.field == "userText"
    assert ai_service.calls == []


@pytest.mark.asyncio
async def test_run_turn_stage_regression_is_accepted(create_session, run_turn, ai_service):
    session = await create_session.execute("u1")
    ai_service.replies = [coach_reply("On to options", stage="options"), coach_reply("Back to goal", stage="goal")]

    await run_turn.execute(RunTurnDTO("u1", session.session_id, "one"))
    result = await run_turn.execute(RunTurnDTO("u1", session.session_id, "two"))

    assert result.stage == "goal"


@pytest.mark.asyncio
async def test_run_turn_commit_failure(create_session, run_turn, store, session_cache):
    session = await create_session.execute("u1")
    store.commit = AsyncMock(side_effect=RuntimeError("quota exceeded"))

    with pytest.raises(PersistenceError):
        await run_turn.execute(RunTurnDTO("u1", session.session_id, "hello"))

    assert session_cache.backend.get(f"u1/{session.session_id}") is None


@pytest.mark.asyncio
async def test_run_turn_uses_face_sheet_summary(create_session, run_turn, ai_service, store):
    await store.set("users/u1/profile/faceSheet", {"faceSheet": {"basic": {"nickname": "Mika"}}})
    session = await create_session.execute("u1")

    await run_turn.execute(RunTurnDTO("u1", session.session_id, "hello"))

    assert ai_service.calls[0][1].startswith("User profile (face sheet):")


@pytest.mark.asyncio
async def test_concurrent_turns_on_one_session(create_session, session_cache, store):
    """Test: both concurrent turns land; each pair stays adjacent and ordered"""
    session = await create_session.execute("u1")

    ai_service = ScriptedAIService()

    async def generate(parts):
        ai_service.calls.append(parts)
        await asyncio.sleep(0.01)
        return coach_reply(f"reply to {parts[-2]}")

    ai_service.generate = generate
    use_case = RunTurnUseCase(session_cache, ai_service)

    await asyncio.gather(
        use_case.execute(RunTurnDTO("u1", session.session_id, "first")),
        use_case.execute(RunTurnDTO("u1", session.session_id, "second")),
    )

    stored = await _stored_messages(store, "u1", session.session_id)
    contents = [record["content"] for record in stored]
    assert sorted(contents) == sorted(["first", "reply to USER: first", "second", "reply to USER: second"])
    for index in (0, 2):
        assert stored[index]["role"] == "user"
        assert stored[index + 1]["content"] == f"reply to USER: {stored[index]['content']}"

    timestamps = [record["createdAt"] for record in stored]
    assert timestamps == sorted(set(timestamps))

    # the later turn saw the earlier exchange
    assert len(ai_service.calls[1]) == len(ai_service.calls[0]) + 2


# ============================================================================
# HISTORY
# ============================================================================

async def _session_with_turns(create_session, run_turn, count):
    session = await create_session.execute("u1")
    for index in range(count):
        await run_turn.execute(RunTurnDTO("u1", session.session_id, f"turn {index}"))
    return session.session_id


@pytest.mark.asyncio
async def test_history_latest_page(create_session, run_turn, get_history):
    session_id = await _session_with_turns(create_session, run_turn, 2)

    history = await get_history.execute("u1", session_id)

    assert [message["content"] for message in history.messages] == [
        "Tell me more.", "turn 1", "Tell me more."
    ]
    assert history.has_more is True
    assert history.cursor == history.messages[0]["createdAt"]
    assert history.to_dict()["cursor"] == history.cursor


@pytest.mark.asyncio
async def test_history_paging_with_cursor(create_session, run_turn, get_history):
    session_id = await _session_with_turns(create_session, run_turn, 2)

    latest = await get_history.execute("u1", session_id)
    older = await get_history.execute("u1", session_id, before=latest.cursor)

    assert [message["content"] for message in older.messages] == ["turn 0"]
    assert older.has_more is False
    assert older.cursor is None
    assert "cursor" not in older.to_dict()


@pytest.mark.asyncio
async def test_history_limit_clamped(create_session, run_turn, get_history):
    session_id = await _session_with_turns(create_session, run_turn, 4)

    assert len((await get_history.execute("u1", session_id, limit=50)).messages) == 5
    assert len((await get_history.execute("u1", session_id, limit=0)).messages) == 1
    assert len((await get_history.execute("u1", session_id, limit="2")).messages) == 2


@pytest.mark.asyncio
async def test_history_rejects_bad_cursor(get_history):
    with pytest.raises(InvalidInputError):
        await get_history.execute("u1", "s1", before="yesterday")


@pytest.mark.asyncio
async def test_history_empty_session(get_history):
    history = await get_history.execute("u1", "fresh")

    assert history.messages == []
    assert history.has_more is False
    assert history.stage == "intro"


# ============================================================================
# LIST SESSIONS
# ============================================================================

@pytest.mark.asyncio
async def test_list_sessions_most_recent_first(store):
    await store.set(session_path("u1", "a"), {"stage": "goal", "coachType": "kanon", "createdAt": 1, "updatedAt": 10})
    await store.set(session_path("u1", "b"), {"stage": "Wrap-up", "coachType": "???", "createdAt": 2, "updatedAt": 20})
    await store.set(session_path("u2", "c"), {"stage": "goal", "coachType": "akito", "createdAt": 3, "updatedAt": 30})

    sessions = await ListSessionsUseCase(store).execute("u1")

    assert [session.to_dict() for session in sessions] == [
        {"sessionId": "b", "stage": "closing", "coachType": "akito", "createdAt": 2, "updatedAt": 20},
        {"sessionId": "a", "stage": "goal", "coachType": "kanon", "createdAt": 1, "updatedAt": 10},
    ]


@pytest.mark.asyncio
async def test_list_sessions_coerces_timestamps(store):
    """Test: malformed stored timestamps never reach the summary"""
    await store.set(session_path("u1", "a"), {"stage": "goal", "createdAt": "yesterday", "updatedAt": 30.7})
    await store.set(session_path("u1", "b"), {"stage": "goal", "createdAt": True, "updatedAt": 20})

    sessions = await ListSessionsUseCase(store).execute("u1")

    assert [(s.session_id, s.created_at, s.updated_at) for s in sessions] == [
        ("a", None, 30),
        ("b", None, 20),
    ]


@pytest.mark.asyncio
async def test_list_sessions_store_failure(store):
    store.query = AsyncMock(side_effect=RuntimeError("down"))

    with pytest.raises(PersistenceError):
        await ListSessionsUseCase(store).execute("u1")

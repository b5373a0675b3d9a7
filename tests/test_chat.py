import pytest

from feedback_hub.chat import NO_RESPONSE, ChatAdapter, ChatSession
from feedback_hub.config import ChatConfig
from feedback_hub.errors import InvalidInput, TextGenerationError

from tests.conftest import FakeGenerator


@pytest.mark.asyncio
@pytest.mark.parametrize("question", ["", "   ", None])
async def test_blank_question_rejected(question):
    gen = FakeGenerator("unused")
    with pytest.raises(InvalidInput):
        await ChatAdapter(gen, ChatConfig()).ask(question)
    assert gen.calls == []


@pytest.mark.asyncio
async def test_question_wrapped_with_system_instruction():
    gen = FakeGenerator({"response": "Argo was hit hardest."})
    answer = await ChatAdapter(gen, ChatConfig(), max_tokens=128).ask("Which product?")

    assert answer == "Argo was hit hardest."
    messages = gen.calls[0]["messages"]
    assert messages[0] == {"role": "system", "content": ChatConfig().system_prompt}
    assert messages[1] == {"role": "user", "content": "Which product?"}
    assert gen.calls[0]["max_tokens"] == 128


@pytest.mark.asyncio
async def test_raw_text_answer():
    answer = await ChatAdapter(FakeGenerator("Just text"), ChatConfig()).ask("q")
    assert answer == "Just text"


@pytest.mark.asyncio
@pytest.mark.parametrize("failure", [TextGenerationError("upstream 503"), RuntimeError("socket closed")])
async def test_failures_become_text(failure):
    answer = await ChatAdapter(FakeGenerator(failure), ChatConfig()).ask("valid question")
    assert isinstance(answer, str)
    assert "Error" in answer
    assert str(failure) in answer


@pytest.mark.asyncio
async def test_session_records_turns():
    session = ChatSession(ChatAdapter(FakeGenerator("first", ""), ChatConfig()))

    assert await session.send("   ") is None
    reply = await session.send("hello")
    await session.send("again")

    assert reply.content == "first"
    assert [(t.role, t.content) for t in session.turns] == [
        ("user", "hello"),
        ("assistant", "first"),
        ("user", "again"),
        ("assistant", NO_RESPONSE),
    ]

import asyncio

from services.llm_oracles import (
    EMPTY_QUESTION_PLACEHOLDER,
    FAILED_QUESTION_PLACEHOLDER,
    EvaluationOracle,
    QuestionOracle,
)

from fakes import Slow, fake_llm_client

TRANSCRIPT = [
    {"question": "What is a closure?", "answer": "A function with its lexical scope."},
    {"question": "What is hoisting?", "answer": "Declarations move to the top of scope."},
]


def test_next_question_returns_stripped_content():
    client = fake_llm_client("  What is the event loop?  \n")
    oracle = QuestionOracle(client=client, model="test-model", timeout=1)

    question = asyncio.run(oracle.next_question("previous", "JavaScript", 2))

    assert question == "What is the event loop?"
    call = client.chat.completions.calls[0]
    assert call["model"] == "test-model"
    assert "JavaScript" in call["messages"][0]["content"]
    assert "question number 3" in call["messages"][1]["content"]


def test_next_question_transport_failure_uses_placeholder():
    oracle = QuestionOracle(client=fake_llm_client(RuntimeError("connection reset")), timeout=1)
    assert asyncio.run(oracle.next_question("", "Python", 0)) == FAILED_QUESTION_PLACEHOLDER


def test_next_question_empty_content_uses_placeholder():
    oracle = QuestionOracle(client=fake_llm_client("   "), timeout=1)
    assert asyncio.run(oracle.next_question("", "Python", 0)) == EMPTY_QUESTION_PLACEHOLDER


def test_next_question_timeout_uses_placeholder():
    oracle = QuestionOracle(client=fake_llm_client(Slow(delay=1.0)), timeout=0.05)
    assert asyncio.run(oracle.next_question("", "Python", 0)) == FAILED_QUESTION_PLACEHOLDER


def test_retry_before_fallback():
    client = fake_llm_client(RuntimeError("503"), "Explain generators.")
    oracle = QuestionOracle(client=client, timeout=1, max_retries=1)

    assert asyncio.run(oracle.next_question("", "Python", 0)) == "Explain generators."
    assert len(client.chat.completions.calls) == 2


def test_evaluate_normalizes_output():
    client = fake_llm_client('{"overall_score": 12, "positives": ["Clear"], "weaknesses": [], "feedback": "Good"}')
    oracle = EvaluationOracle(client=client, timeout=1)

    result = asyncio.run(oracle.evaluate(TRANSCRIPT))

    assert result.overall_score == 10
    assert result.strengths == ["Clear"]
    assert result.summary == "Good"
    prompt = client.chat.completions.calls[0]["messages"][1]["content"]
    assert "Q1: What is a closure?" in prompt
    assert "A: Declarations move to the top of scope." in prompt
    assert client.chat.completions.calls[0]["temperature"] == 0


def test_evaluate_unparsable_output():
    oracle = EvaluationOracle(client=fake_llm_client("The candidate did fine."), timeout=1)

    result = asyncio.run(oracle.evaluate(TRANSCRIPT))

    assert result.overall_score == 0
    assert result.summary
    assert result.raw == "The candidate did fine."


def test_evaluate_transport_failure():
    oracle = EvaluationOracle(client=fake_llm_client(ConnectionError("down")), timeout=1)

    result = asyncio.run(oracle.evaluate(TRANSCRIPT))

    assert result.overall_score == 0
    assert result.areas_to_improve == ["Evaluation failed due to system error."]
    assert result.raw == ""


def test_evaluate_huge_score_is_clamped():
    client = fake_llm_client('{"overallScore": 1' + "0" * 400 + ', "summary": "ok"}')
    oracle = EvaluationOracle(client=client, timeout=1)

    result = asyncio.run(oracle.evaluate(TRANSCRIPT))

    assert result.overall_score == 10
    assert result.summary == "ok"
